from PySide6.QtWidgets import QComboBox, QLineEdit
from PySide6.QtGui import QStandardItem, QStandardItemModel, QPalette, QBrush, QRegularExpressionValidator
from PySide6.QtCore import Qt, Signal, QEvent, QRegularExpression

from incendios_cierre.core.campos import formatear_numero, parse_numero


class NumericLineEdit(QLineEdit):
    """Entrada numérica; acepta coma o punto decimal. Vacío = None."""

    value_changed = Signal(object)

    def __init__(self, parent=None, placeholder="0"):
        super().__init__(parent)
        self.setValidator(QRegularExpressionValidator(QRegularExpression(r"^-?\d*([.,]\d*)?$"), self))
        self.setPlaceholderText(placeholder)
        self.textEdited.connect(lambda text: self.value_changed.emit(parse_numero(text)))

    def value(self):
        return parse_numero(self.text())

    def setValue(self, value):
        text = formatear_numero(value)
        # No pisar lo que el usuario escribe ("5," sigue siendo 5)
        if parse_numero(self.text()) == value and self.text():
            return
        self.blockSignals(True)
        self.setText(text)
        self.blockSignals(False)


class CheckableComboBox(QComboBox):
    """Combo de selección múltiple con casillas; los datos son los ``value`` de opción."""

    selectionChanged = Signal(list)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setEditable(True)
        self.lineEdit().setReadOnly(True)

        palette = self.lineEdit().palette()
        palette.setBrush(QPalette.Base, QBrush(Qt.transparent))
        self.lineEdit().setPalette(palette)

        self.setModel(QStandardItemModel(self))
        self.view().viewport().installEventFilter(self)
        self.model().itemChanged.connect(self._on_item_changed)
        self.lineEdit().setPlaceholderText("Seleccione...")
        self._silencioso = False

    def addItem(self, text, userData=None):
        item = QStandardItem(text)
        item.setData(userData, Qt.UserRole)
        item.setFlags(Qt.ItemIsEnabled | Qt.ItemIsUserCheckable)
        item.setData(Qt.Unchecked, Qt.CheckStateRole)
        self.model().appendRow(item)

    def _items(self):
        return [self.model().item(i) for i in range(self.model().rowCount())]

    def currentData(self):
        return [item.data(Qt.UserRole) for item in self._items() if item.checkState() == Qt.Checked]

    def setCurrentData(self, values):
        """Marca los ``values`` dados sin emitir ``selectionChanged``."""
        marcados = {str(v) for v in (values or [])}
        self._silencioso = True
        try:
            for item in self._items():
                estado = Qt.Checked if str(item.data(Qt.UserRole)) in marcados else Qt.Unchecked
                if item.checkState() != estado:
                    item.setCheckState(estado)
        finally:
            self._silencioso = False
        self.updateText()

    def updateText(self):
        texto = ", ".join(item.text() for item in self._items() if item.checkState() == Qt.Checked)
        self.lineEdit().setText(texto)

    def _on_item_changed(self, _item):
        self.updateText()
        if not self._silencioso:
            self.selectionChanged.emit(self.currentData())

    def eventFilter(self, widget, event):
        # El popup no se cierra al marcar
        if widget == self.view().viewport() and event.type() == QEvent.MouseButtonRelease:
            item = self.model().itemFromIndex(self.view().indexAt(event.pos()))
            if item is not None and item.flags() & Qt.ItemIsUserCheckable:
                item.setCheckState(Qt.Unchecked if item.checkState() == Qt.Checked else Qt.Checked)
            return True
        return super().eventFilter(widget, event)

    def hidePopup(self):
        super().hidePopup()
        self.updateText()
