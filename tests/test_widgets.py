from PySide6.QtCore import Qt
from PySide6.QtWidgets import QWidget

from incendios_cierre.components.custom_inputs import CheckableComboBox, NumericLineEdit
from incendios_cierre.components.loading_overlay import LoadingOverlay


def test_overlay_con_retardo(qapp):
    parent = QWidget()
    overlay = LoadingOverlay(parent, "Guardando cierre...")

    overlay.set_loading(True)
    assert overlay.pending
    assert not overlay.spinner.is_spinning()

    # Respuesta rápida: nunca llega a mostrarse
    overlay.set_loading(False)
    assert not overlay.pending
    assert not overlay.isVisibleTo(parent)


def test_overlay_inmediato(qapp):
    parent = QWidget()
    overlay = LoadingOverlay(parent, delay_ms=0)
    overlay.show_loading("Finalizando...")
    assert overlay.isVisibleTo(parent)
    assert overlay.label.text() == "Finalizando..."
    assert overlay.spinner.is_spinning()

    overlay.hide_loading()
    assert not overlay.isVisibleTo(parent)
    assert not overlay.spinner.is_spinning()


def test_numeric_line_edit(qapp):
    edit = NumericLineEdit()
    edit.setValue(12.5)
    assert edit.text() == "12.5"
    assert edit.value() == 12.5

    edit.setText("7,25")
    assert edit.value() == 7.25
    # Mismo valor: se respeta lo escrito
    edit.setValue(7.25)
    assert edit.text() == "7,25"

    edit.setValue(None)
    assert edit.text() == ""
    assert edit.value() is None


def test_checkable_combo(qapp):
    combo = CheckableComboBox()
    combo.addItem("Brigada", "brigada")
    combo.addItem("Bomberos", "bomberos")
    combo.addItem("Municipio", "municipio")

    emitidos = []
    combo.selectionChanged.connect(emitidos.append)

    combo.setCurrentData(["bomberos", "municipio"])
    assert combo.currentData() == ["bomberos", "municipio"]
    assert combo.lineEdit().text() == "Bomberos, Municipio"
    assert emitidos == []

    combo.model().item(0).setCheckState(Qt.Checked)
    assert emitidos[-1] == ["brigada", "bomberos", "municipio"]
