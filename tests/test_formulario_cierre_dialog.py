from PySide6.QtWidgets import QDialog, QLineEdit

from conftest import FakeApi
from incendios_cierre.components.formulario_cierre_dialog import FormularioCierreDialog
from incendios_cierre.services.formulario_cierre_service import FormularioCierreService
from incendios_cierre.viewmodels.formulario_cierre_viewmodel import FormularioCierreViewModel

INCENDIO = "inc-9"

FORMULARIO = {
    "plantilla": {"plantilla_uuid": "p1", "nombre": "Cierre de incendio", "activa": True},
    "secciones": [
        {"seccion_uuid": "s1", "nombre": "Recursos", "orden": 1, "campos": [
            {"campo_uuid": "resp", "nombre": "Responsable", "tipo": "text", "orden": 1, "requerido": True},
            {"campo_uuid": "apoyo", "nombre": "Apoyo", "tipo": "select", "orden": 2, "opciones": [
                {"value": "terrestre", "label": "Terrestre"},
                {"value": "aereo", "label": "Aéreo", "requiresQuantity": True, "quantityLabel": "Aeronaves"},
            ]},
        ]},
    ],
}


def _dialog(session):
    api = FakeApi({("GET", f"/cierre/{INCENDIO}/formulario"): FORMULARIO})
    vm = FormularioCierreViewModel(FormularioCierreService(api), session, INCENDIO)
    dialog = FormularioCierreDialog(vm)
    vm.load()
    return dialog, vm, api


def test_renderiza_campos_de_la_plantilla(sync_workers, user_session):
    dialog, vm, _ = _dialog(user_session)

    assert dialog.title_label.text() == "Cierre de incendio"
    assert set(dialog.campo_widgets) == {"resp", "apoyo"}
    assert isinstance(dialog.campo_widgets["resp"].input, QLineEdit)
    assert dialog.progress_label.text() == "Progreso: 0% (0/1 campos requeridos)"
    assert not dialog.finalizar_btn.isVisibleTo(dialog)


def test_refleja_cambios_del_view_model(sync_workers, user_session):
    dialog, vm, _ = _dialog(user_session)
    apoyo = dialog.campo_widgets["apoyo"]
    fila, cantidad, porcentaje = apoyo.extras["aereo"]
    assert porcentaje is None
    assert not apoyo.extras_layout.isRowVisible(fila)

    vm.set_texto("resp", "Ana")
    vm.seleccionar_opcion("apoyo", "aereo")
    vm.set_cantidad("apoyo", "2", "aereo")

    assert dialog.campo_widgets["resp"].input.text() == "Ana"
    assert apoyo.input.currentData() == "aereo"
    assert apoyo.extras_layout.isRowVisible(fila)
    assert cantidad.value() == 2
    assert dialog.progress_label.text() == "Progreso: 100% (1/1 campos requeridos)"


def test_guardar_acepta_el_dialogo(sync_workers, user_session):
    dialog, vm, api = _dialog(user_session)
    vm.set_texto("resp", "Ana")
    assert vm.guardar()

    assert [c[:2] for c in api.calls if c[0] == "POST"] == [("POST", f"/cierre/{INCENDIO}/respuestas")]
    assert dialog.result() == QDialog.Accepted
