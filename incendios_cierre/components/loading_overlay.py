from PySide6.QtWidgets import QWidget, QVBoxLayout, QLabel
from PySide6.QtCore import Qt, QTimer, QRectF, QEvent
from PySide6.QtGui import QPainter, QColor, QPen, QBrush

COLOR_PRIMARIO = "#B71C1C"
COLOR_PISTA = "#e0e0e0"


class Spinner(QWidget):
    """Arco giratorio; solo consume timer mientras está activo."""

    def __init__(self, parent=None, radius=20, thickness=4, color=COLOR_PRIMARIO):
        super().__init__(parent)
        self.radius = radius
        self.thickness = thickness
        self.color = QColor(color)
        side = (radius + thickness) * 2 + 8
        self.setFixedSize(side, side)

        self._angle = 0
        self._timer = QTimer(self)
        self._timer.setInterval(16)
        self._timer.timeout.connect(self._rotate)

    def start(self):
        if not self._timer.isActive():
            self._timer.start()

    def stop(self):
        self._timer.stop()
        self._angle = 0

    def is_spinning(self) -> bool:
        return self._timer.isActive()

    def _rotate(self):
        self._angle = (self._angle + 5) % 360
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        pen = QPen(QColor(COLOR_PISTA), self.thickness)
        pen.setCapStyle(Qt.RoundCap)
        painter.setPen(pen)

        r = self.radius
        c = self.rect().center()
        arco = QRectF(c.x() - r, c.y() - r, r * 2, r * 2)
        painter.drawEllipse(arco)

        pen.setColor(self.color)
        painter.setPen(pen)
        # Ángulos de Qt en 1/16 de grado; negativo = horario
        painter.drawArc(arco, -self._angle * 16, -100 * 16)


class LoadingOverlay(QWidget):
    """
    Capa semitransparente que bloquea la vista mientras hay una llamada en
    curso. Aparece tras ``delay_ms`` para no parpadear en respuestas rápidas.
    """

    def __init__(self, parent=None, message="Cargando...", delay_ms=150):
        super().__init__(parent)
        self.default_message = message
        if parent:
            self.resize(parent.size())
            parent.installEventFilter(self)

        self.setAttribute(Qt.WA_TransparentForMouseEvents, False)
        self.setVisible(False)

        self._delay = QTimer(self)
        self._delay.setSingleShot(True)
        self._delay.setInterval(delay_ms)
        self._delay.timeout.connect(self._mostrar)

        layout = QVBoxLayout(self)
        layout.setAlignment(Qt.AlignCenter)

        self.spinner = Spinner()
        layout.addWidget(self.spinner, 0, Qt.AlignCenter)

        self.label = QLabel(message)
        self.label.setStyleSheet(f"color: {COLOR_PRIMARIO}; font-weight: bold; font-size: 14px; margin-top: 10px;")
        layout.addWidget(self.label, 0, Qt.AlignCenter)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setBrush(QBrush(QColor(255, 255, 255, 200)))
        painter.setPen(Qt.NoPen)
        painter.drawRect(self.rect())

    def eventFilter(self, obj, event):
        if obj == self.parent() and event.type() == QEvent.Resize:
            self.resize(event.size())
        return super().eventFilter(obj, event)

    @property
    def pending(self) -> bool:
        return self._delay.isActive()

    def set_loading(self, loading: bool, message: str = None):
        if loading:
            self.show_loading(message)
        else:
            self.hide_loading()

    def show_loading(self, message: str = None):
        self.label.setText(message or self.default_message)
        if self.isVisible() or self._delay.isActive():
            return
        if self._delay.interval() <= 0:
            self._mostrar()
        else:
            self._delay.start()

    def _mostrar(self):
        self.spinner.start()
        self.raise_()
        self.show()

    def hide_loading(self):
        self._delay.stop()
        self.spinner.stop()
        self.hide()
