"""Ticket model, the only record the tracker stores."""
import uuid
from datetime import datetime, timezone

from .base import db
from ..constants import PaymentStatus


def _new_ticket_id():
    return uuid.uuid4().hex


class Ticket(db.Model):
    __tablename__ = 'tickets'

    id = db.Column(db.String(32), primary_key=True, default=_new_ticket_id)
    tipo = db.Column(db.String(3), nullable=False)  # 'VIP' or 'GEN'
    # Unique among live tickets; checked by the form flows, not by the DB
    numero_ticket = db.Column(db.String(10), nullable=False, index=True)
    estado = db.Column(db.String(10), nullable=False, default=PaymentStatus.PAGADO)
    nombre_comprador = db.Column(db.String(120), nullable=False)
    contacto_comprador = db.Column(db.String(120), nullable=True)
    vendedor_nombre = db.Column(db.String(120), nullable=False)
    fecha_registro = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    # Fields the edit flow replaces; seller and registration time never change
    EDITABLE_FIELDS = ('tipo', 'numero_ticket', 'estado', 'nombre_comprador', 'contacto_comprador')

    def __repr__(self):
        return f'<Ticket {self.numero_ticket}: {self.estado}>'

    @property
    def suffix(self):
        """The six digits after the type prefix."""
        return self.numero_ticket.split('-', 1)[1] if '-' in (self.numero_ticket or '') else ''

    @classmethod
    def find_by_code(cls, numero_ticket):
        return cls.query.filter_by(numero_ticket=numero_ticket).all()

    def to_snapshot(self):
        """
        Plain dict copy of the record, as handed to change handlers and
        feed subscribers. Keys follow the names used on the spreadsheet side.
        """
        return {
            'id': self.id,
            'tipo': self.tipo,
            'numeroTicket': self.numero_ticket,
            'estado': self.estado,
            'nombreComprador': self.nombre_comprador,
            'contactoComprador': self.contacto_comprador,
            'vendedorNombre': self.vendedor_nombre,
            'fechaRegistro': self.fecha_registro,
        }

    def to_dict(self):
        """Convert ticket to dictionary for JSON serialization."""
        data = self.to_snapshot()
        data['fechaRegistro'] = self.fecha_registro.isoformat() if self.fecha_registro else None
        return data
