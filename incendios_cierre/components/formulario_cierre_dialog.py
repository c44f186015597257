from functools import partial

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QWidget, QLabel, QPushButton, QFrame,
    QScrollArea, QLineEdit, QPlainTextEdit, QComboBox, QCheckBox, QFormLayout,
    QProgressBar, QMessageBox
)
from PySide6.QtCore import Qt, QTimer

from incendios_cierre.components.custom_inputs import CheckableComboBox, NumericLineEdit
from incendios_cierre.components.loading_overlay import LoadingOverlay
from incendios_cierre.core.campos import VistaCampo, parse_numero
from incendios_cierre.core.estado_cierre import EstadoCierre, cierre_color
from incendios_cierre.models.plantilla import TipoCampo
from incendios_cierre.viewmodels.formulario_cierre_viewmodel import FormularioCierreViewModel

_PLACEHOLDER_FECHA = {
    TipoCampo.DATE: "AAAA-MM-DD",
    TipoCampo.DATETIME: "AAAA-MM-DDTHH:MM",
}


class CampoWidget(QWidget):
    """Bloque de un campo: etiqueta, ayuda, entrada y error."""

    def __init__(self, vm: FormularioCierreViewModel, vista: VistaCampo, parent=None):
        super().__init__(parent)
        self.vm = vm
        self.campo_uuid = vista.campo_uuid
        self.tipo = vista.tipo
        self.extras = {}  # value -> (fila, cantidad, porcentaje)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)

        label_layout = QHBoxLayout()
        lbl = QLabel(vista.etiqueta)
        lbl.setStyleSheet("font-weight: bold; font-size: 14px; color: #1e293b;")
        label_layout.addWidget(lbl)
        if vista.unidad:
            unidad = QLabel(vista.unidad)
            unidad.setStyleSheet("font-size: 12px; color: #64748b;")
            label_layout.addWidget(unidad, 0, Qt.AlignRight)
        layout.addLayout(label_layout)

        if vista.descripcion:
            desc = QLabel(vista.descripcion)
            desc.setStyleSheet("font-size: 12px; color: #64748b; margin-bottom: 2px;")
            desc.setWordWrap(True)
            layout.addWidget(desc)

        self.input = self._crear_input(vista)
        layout.addWidget(self.input)

        if vista.tipo in (TipoCampo.SELECT, TipoCampo.MULTISELECT):
            self.extras_box = QWidget()
            self.extras_layout = QFormLayout(self.extras_box)
            self.extras_layout.setContentsMargins(16, 0, 0, 0)
            for opcion in vista.opciones:
                if opcion.requiere_cantidad or opcion.requiere_porcentaje:
                    self._crear_extras(opcion)
            layout.addWidget(self.extras_box)

        self.error_label = QLabel()
        self.error_label.setStyleSheet("font-size: 12px; color: #dc2626;")
        self.error_label.setVisible(False)
        layout.addWidget(self.error_label)

        self.actualizar(vista)

    def _crear_input(self, vista: VistaCampo):
        tipo = vista.tipo
        if tipo == TipoCampo.TEXTAREA:
            inp = QPlainTextEdit()
            inp.setFixedHeight(100)
            inp.setPlaceholderText(vista.placeholder or "")
            inp.textChanged.connect(lambda: self.vm.set_texto(self.campo_uuid, inp.toPlainText()))
            return inp

        if tipo in (TipoCampo.NUMBER, TipoCampo.PERCENTAGE):
            inp = NumericLineEdit(placeholder=vista.placeholder or "0")
            inp.textEdited.connect(partial(self.vm.set_texto, self.campo_uuid))
            return inp

        if tipo in (TipoCampo.BOOLEAN, TipoCampo.CHECKBOX):
            inp = QCheckBox(vista.placeholder or "Sí")
            inp.toggled.connect(partial(self.vm.set_valor, self.campo_uuid))
            return inp

        if tipo == TipoCampo.SELECT:
            inp = QComboBox()
            inp.addItem("Seleccione...", None)
            for opcion in vista.opciones:
                inp.addItem(opcion.label, opcion.value)
            inp.activated.connect(lambda index: self.vm.seleccionar_opcion(self.campo_uuid, inp.itemData(index)))
            return inp

        if tipo == TipoCampo.MULTISELECT:
            inp = CheckableComboBox()
            for opcion in vista.opciones:
                inp.addItem(opcion.label, opcion.value)
            inp.selectionChanged.connect(self._on_multiselect)
            return inp

        inp = QLineEdit()
        inp.setPlaceholderText(vista.placeholder or _PLACEHOLDER_FECHA.get(tipo, ""))
        inp.textEdited.connect(partial(self.vm.set_texto, self.campo_uuid))
        return inp

    def _crear_extras(self, opcion):
        fila = QWidget()
        fila_layout = QHBoxLayout(fila)
        fila_layout.setContentsMargins(0, 0, 0, 0)
        cantidad = porcentaje = None
        if opcion.requiere_cantidad:
            cantidad = NumericLineEdit()
            cantidad.textEdited.connect(partial(self._on_cantidad, opcion.value))
            fila_layout.addWidget(QLabel(opcion.etiqueta_cantidad))
            fila_layout.addWidget(cantidad)
        if opcion.requiere_porcentaje:
            porcentaje = NumericLineEdit()
            porcentaje.textEdited.connect(partial(self._on_porcentaje, opcion.value))
            fila_layout.addWidget(QLabel(opcion.etiqueta_porcentaje))
            fila_layout.addWidget(porcentaje)
        self.extras_layout.addRow(QLabel(opcion.label), fila)
        self.extras[opcion.value] = (fila, cantidad, porcentaje)

    def _on_multiselect(self, marcados):
        actuales = {o.value for o in self._vista().opciones if o.seleccionada}
        for value in set(marcados) ^ actuales:
            self.vm.alternar_opcion(self.campo_uuid, value)

    def _on_cantidad(self, value, texto):
        self.vm.set_cantidad(self.campo_uuid, texto, value)

    def _on_porcentaje(self, value, texto):
        self.vm.set_porcentaje(self.campo_uuid, texto, value)

    def _vista(self) -> VistaCampo:
        for _seccion, vistas in self.vm.vistas():
            for vista in vistas:
                if vista.campo_uuid == self.campo_uuid:
                    return vista
        raise KeyError(self.campo_uuid)

    def actualizar(self, vista: VistaCampo):
        """Refleja la vista sin re-emitir cambios hacia el view model."""
        self.input.blockSignals(True)
        try:
            if isinstance(self.input, QPlainTextEdit):
                if self.input.toPlainText() != vista.texto:
                    self.input.setPlainText(vista.texto)
            elif isinstance(self.input, NumericLineEdit):
                self.input.setValue(parse_numero(vista.texto))
            elif isinstance(self.input, QCheckBox):
                self.input.setChecked(vista.marcado)
            elif isinstance(self.input, CheckableComboBox):
                self.input.setCurrentData([o.value for o in vista.opciones if o.seleccionada])
            elif isinstance(self.input, QComboBox):
                elegida = next((o.value for o in vista.opciones if o.seleccionada), None)
                index = self.input.findData(elegida) if elegida is not None else 0
                self.input.setCurrentIndex(max(index, 0))
            elif self.input.text() != vista.texto:
                self.input.setText(vista.texto)
        finally:
            self.input.blockSignals(False)

        for opcion in vista.opciones:
            if opcion.value not in self.extras:
                continue
            fila, cantidad, porcentaje = self.extras[opcion.value]
            self.extras_layout.setRowVisible(fila, opcion.mostrar_extras)
            if cantidad is not None:
                cantidad.setValue(opcion.cantidad)
            if porcentaje is not None:
                porcentaje.setValue(opcion.porcentaje)

        self.error_label.setText(vista.error or "")
        self.error_label.setVisible(bool(vista.error))

    def set_read_only(self, read_only: bool):
        self.setEnabled(not read_only)


class FormularioCierreDialog(QDialog):
    """Formulario de cierre de un incendio construido desde la plantilla activa."""

    def __init__(self, view_model: FormularioCierreViewModel, parent=None):
        super().__init__(parent)
        self.vm = view_model
        self.campo_widgets = {}

        self.setObjectName("formularioCierreDialog")
        self.setWindowTitle("Cierre del incendio")
        self.setModal(True)
        self.resize(900, 760)
        self.setStyleSheet("#formularioCierreDialog { background-color: #f1f5f9; }")

        self._init_ui()
        self.loading_overlay = LoadingOverlay(self, "Cargando formulario...")

        self.vm.loading_changed.connect(self.loading_overlay.set_loading)
        self.vm.form_loaded.connect(self._on_form_loaded)
        self.vm.valores_changed.connect(self._refresh)
        self.vm.errores_changed.connect(self._refresh)
        self.vm.error.connect(self._on_error)
        self.vm.saved.connect(self.accept)
        self.vm.finalized.connect(self._on_finalized)
        self.vm.close_requested.connect(self._on_close_requested)

        QTimer.singleShot(0, self.vm.load)

    def _init_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(24, 24, 24, 24)
        main_layout.setSpacing(16)

        self.top_frame = QFrame()
        self.top_frame.setObjectName("topFrame")
        self.top_frame.setStyleSheet("#topFrame { background-color: white; border-radius: 16px; }")
        top_layout = QVBoxLayout(self.top_frame)
        top_layout.setContentsMargins(32, 24, 32, 24)

        self.title_label = QLabel("Formulario de cierre")
        self.title_label.setStyleSheet("font-size: 24px; font-weight: bold; color: #0f172a;")
        top_layout.addWidget(self.title_label)

        self.estado_label = QLabel()
        self.estado_label.setVisible(False)
        top_layout.addWidget(self.estado_label)

        self.progress_label = QLabel("Progreso: 0% (0/0 campos requeridos)")
        self.progress_label.setStyleSheet("font-size: 12px; color: #475569; margin-top: 12px; font-weight: 500;")
        top_layout.addWidget(self.progress_label)

        self.progress_bar = QProgressBar()
        self.progress_bar.setTextVisible(False)
        self.progress_bar.setFixedHeight(6)
        top_layout.addWidget(self.progress_bar)
        main_layout.addWidget(self.top_frame)

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        self.scroll.setFrameShape(QScrollArea.NoFrame)
        self.body = QWidget()
        self.body_layout = QVBoxLayout(self.body)
        self.body_layout.setSpacing(16)
        self.scroll.setWidget(self.body)
        main_layout.addWidget(self.scroll, 1)

        footer = QHBoxLayout()
        self.finalizar_btn = QPushButton("Marcar como extinguido")
        self.finalizar_btn.setObjectName("dangerButton")
        self.finalizar_btn.clicked.connect(lambda: self.vm.finalizar(self._confirmar))
        self.finalizar_btn.setVisible(False)
        footer.addWidget(self.finalizar_btn)
        footer.addStretch()

        cancel_btn = QPushButton("Cancelar")
        cancel_btn.setObjectName("secondaryButton")
        cancel_btn.clicked.connect(self.reject)
        footer.addWidget(cancel_btn)

        self.save_btn = QPushButton("Guardar")
        self.save_btn.setObjectName("primaryButton")
        self.save_btn.clicked.connect(self.vm.guardar)
        footer.addWidget(self.save_btn)
        main_layout.addLayout(footer)

    # ===============================
    # Render
    # ===============================
    def _limpiar_body(self):
        while self.body_layout.count():
            item = self.body_layout.takeAt(0)
            if item.widget() is not None:
                item.widget().deleteLater()
        self.campo_widgets = {}

    def _on_form_loaded(self, formulario):
        self._limpiar_body()
        self.title_label.setText(formulario.plantilla.nombre)

        for seccion, vistas in self.vm.vistas():
            card = QFrame()
            card.setObjectName("seccionCard")
            card.setStyleSheet("#seccionCard { background-color: white; border-radius: 16px; }")
            card_layout = QVBoxLayout(card)
            card_layout.setContentsMargins(24, 24, 24, 24)
            card_layout.setSpacing(20)

            titulo = QLabel(seccion.nombre)
            titulo.setStyleSheet("font-size: 20px; font-weight: bold; color: #1e293b;")
            card_layout.addWidget(titulo)
            if seccion.descripcion:
                desc = QLabel(seccion.descripcion)
                desc.setStyleSheet("font-size: 14px; color: #64748b;")
                desc.setWordWrap(True)
                card_layout.addWidget(desc)

            for vista in vistas:
                widget = CampoWidget(self.vm, vista)
                self.campo_widgets[vista.campo_uuid] = widget
                card_layout.addWidget(widget)
            self.body_layout.addWidget(card)

        self.body_layout.addStretch()
        self._refresh()

    def _refresh(self, *_args):
        for _seccion, vistas in self.vm.vistas():
            for vista in vistas:
                widget = self.campo_widgets.get(vista.campo_uuid)
                if widget is not None:
                    widget.actualizar(vista)
                    widget.set_read_only(self.vm.solo_lectura)

        completos, total = self.vm.progreso()
        porcentaje = int(completos / total * 100) if total else 100
        self.progress_bar.setMaximum(total or 1)
        self.progress_bar.setValue(completos if total else 1)
        self.progress_label.setText(f"Progreso: {porcentaje}% ({completos}/{total} campos requeridos)")

        extinguido = self.vm.extinguido
        self.estado_label.setVisible(extinguido)
        if extinguido:
            self.estado_label.setText("✓ Este incendio está extinguido")
            self.estado_label.setStyleSheet(
                f"font-weight: bold; color: {cierre_color(EstadoCierre.EXTINGUIDO)}; margin-top: 8px;"
            )
        self.finalizar_btn.setVisible(self.vm.puede_finalizar)
        self.save_btn.setEnabled(not self.vm.solo_lectura)

    # ===============================
    # Acciones
    # ===============================
    def _confirmar(self, titulo, mensaje) -> bool:
        respuesta = QMessageBox.question(self, titulo, mensaje, QMessageBox.Yes | QMessageBox.Cancel, QMessageBox.Cancel)
        return respuesta == QMessageBox.Yes

    def _on_finalized(self):
        self._refresh()
        QMessageBox.information(self, "Listo", "Incendio finalizado")

    def _on_close_requested(self):
        if self.isVisible():
            self.reject()

    def _on_error(self, titulo, mensaje):
        QMessageBox.warning(self, titulo, mensaje)

    def done(self, result):
        self.vm.dispose()
        super().done(result)

    def resizeEvent(self, event):
        if hasattr(self, "loading_overlay"):
            self.loading_overlay.resize(event.size())
        super().resizeEvent(event)
