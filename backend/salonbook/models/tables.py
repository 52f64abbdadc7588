from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Table,
    Text,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


t_salon_services = Table(
    'salon_services', metadata,
    Column('salon_id', ForeignKey('salons.id', ondelete='CASCADE'), primary_key=True),
    Column('service_id', ForeignKey('services.id', ondelete='CASCADE'), primary_key=True),
)


class Salons(Base):
    __tablename__ = 'salons'

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    # {"monday": "9:00 AM - 5:00 PM", "sunday": "Closed", ...}
    hours = Column(JSON, nullable=False, default=dict)

    staff = relationship('Staff', back_populates='salon')
    services = relationship('Services', secondary=t_salon_services, back_populates='salons')
    appointments = relationship('Appointments', back_populates='salon')


class Staff(Base):
    __tablename__ = 'staff'

    id = Column(Integer, primary_key=True)
    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(Text, nullable=False)

    salon = relationship('Salons', back_populates='staff')
    appointments = relationship('Appointments', back_populates='staff')


class Services(Base):
    __tablename__ = 'services'
    __table_args__ = (
        CheckConstraint('duration > 0', name='ck_services_duration_positive'),
        CheckConstraint('price >= 0', name='ck_services_price_non_negative'),
    )

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text)

    salons = relationship('Salons', secondary=t_salon_services, back_populates='services')


class Appointments(Base):
    __tablename__ = 'appointments'
    __table_args__ = (
        Index('ix_appointments_staff_interval', 'staff_id', 'start_at', 'end_at'),
        Index('ix_appointments_salon_start', 'salon_id', 'start_at'),
    )

    id = Column(Integer, primary_key=True)
    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False)
    staff_id = Column(ForeignKey('staff.id', ondelete='CASCADE'), nullable=False)
    # Owned by the auth subsystem, no local users table
    user_id = Column(Integer, nullable=False, index=True)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'booked'"))
    total_price = Column(Numeric(10, 2), nullable=False)
    total_duration = Column(Integer, nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False)
    cancelled_at = Column(DateTime)
    cancelled_by = Column(Integer)
    cancellation_reason = Column(Text)

    salon = relationship('Salons', back_populates='appointments')
    staff = relationship('Staff', back_populates='appointments')
    lines = relationship(
        'AppointmentServices',
        back_populates='appointment',
        cascade='all, delete-orphan',
        order_by='AppointmentServices.id',
    )


class AppointmentServices(Base):
    __tablename__ = 'appointment_services'

    id = Column(Integer, primary_key=True)
    appointment_id = Column(ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False, index=True)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    # Snapshot at booking time
    price = Column(Numeric(10, 2), nullable=False)
    duration = Column(Integer, nullable=False)

    appointment = relationship('Appointments', back_populates='lines')
    service = relationship('Services')
