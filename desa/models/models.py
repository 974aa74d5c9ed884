from __future__ import annotations

from datetime import datetime, date
from enum import Enum

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from desa.extensions import db

SETTINGS_ID = 1


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class TimestampedBase(db.Model):
    """Abstract base providing id/created/updated columns."""

    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class NewsStatus(Enum):
    PUBLISHED = "published"
    DRAFT = "draft"


class SubmissionStatus(Enum):
    PENDING = "pending"
    PROCESSING = "diproses"
    DONE = "selesai"
    REJECTED = "ditolak"


class DesaSettings(TimestampedBase):
    """Site-wide settings. Only the row with id == SETTINGS_ID is used."""

    __tablename__ = "desa_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False, default=SETTINGS_ID)
    nama_desa: Mapped[str] = mapped_column(String(255), nullable=False)
    slogan: Mapped[str | None] = mapped_column(Text)
    alamat: Mapped[str | None] = mapped_column(Text)
    logo: Mapped[str | None] = mapped_column(String(255))
    hero_image: Mapped[str | None] = mapped_column(String(255))
    primary_color: Mapped[str | None] = mapped_column(String(7), default="#3B82F6")
    secondary_color: Mapped[str | None] = mapped_column(String(7), default="#10B981")
    deskripsi: Mapped[str | None] = mapped_column(Text)


class News(TimestampedBase):
    __tablename__ = "news"
    __table_args__ = (
        Index("idx_news_status", "status"),
        Index("idx_news_tanggal", "tanggal"),
    )

    judul: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    konten: Mapped[str] = mapped_column(Text, nullable=False)
    gambar: Mapped[str | None] = mapped_column(String(255))
    tanggal: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    penulis: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[NewsStatus] = mapped_column(
        SqlEnum(NewsStatus, name="news_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=NewsStatus.DRAFT,
    )


class Gallery(TimestampedBase):
    __tablename__ = "galleries"
    __table_args__ = (
        Index("idx_galleries_kategori", "kategori"),
    )

    judul: Mapped[str] = mapped_column(String(255), nullable=False)
    deskripsi: Mapped[str | None] = mapped_column(Text)
    gambar: Mapped[str] = mapped_column(String(255), nullable=False)
    kategori: Mapped[str | None] = mapped_column(String(100))
    tanggal: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)


class Event(TimestampedBase):
    __tablename__ = "events"
    __table_args__ = (
        Index("idx_events_tanggal", "tanggal"),
    )

    judul: Mapped[str] = mapped_column(String(255), nullable=False)
    deskripsi: Mapped[str | None] = mapped_column(Text)
    tanggal: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    lokasi: Mapped[str | None] = mapped_column(String(255))
    gambar: Mapped[str | None] = mapped_column(String(255))

    def is_upcoming(self, now: datetime | None = None) -> bool:
        return self.tanggal >= (now or datetime.now())


class OrganizationMember(TimestampedBase):
    __tablename__ = "organisasi"
    __table_args__ = (
        Index("idx_organisasi_urutan", "urutan"),
    )

    nama: Mapped[str] = mapped_column(String(255), nullable=False)
    jabatan: Mapped[str] = mapped_column(String(255), nullable=False)
    foto: Mapped[str | None] = mapped_column(String(255))
    urutan: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Service(TimestampedBase):
    __tablename__ = "layanan"

    nama: Mapped[str] = mapped_column(String(255), nullable=False)
    deskripsi: Mapped[str | None] = mapped_column(Text)
    persyaratan: Mapped[str | None] = mapped_column(Text)
    template_dokumen: Mapped[str | None] = mapped_column(String(255))

    submissions: Mapped[list["ServiceSubmission"]] = relationship(
        back_populates="layanan",
        cascade="all, delete-orphan",
    )


class ServiceSubmission(TimestampedBase):
    __tablename__ = "pengajuan_layanan"
    __table_args__ = (
        Index("idx_pengajuan_status", "status"),
        Index("idx_pengajuan_nomor", "nomor_pengajuan"),
    )

    layanan_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("layanan.id", ondelete="CASCADE"),
        nullable=False,
    )
    nomor_pengajuan: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    nama: Mapped[str] = mapped_column(String(255), nullable=False)
    nik: Mapped[str] = mapped_column(String(16), nullable=False)
    file_pendukung: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[SubmissionStatus] = mapped_column(
        SqlEnum(SubmissionStatus, name="submission_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=SubmissionStatus.PENDING,
    )
    catatan: Mapped[str | None] = mapped_column(Text)

    layanan: Mapped[Service] = relationship(back_populates="submissions")


class Document(TimestampedBase):
    __tablename__ = "dokumen"
    __table_args__ = (
        Index("idx_dokumen_kategori", "kategori"),
    )

    judul: Mapped[str] = mapped_column(String(255), nullable=False)
    deskripsi: Mapped[str | None] = mapped_column(Text)
    file_path: Mapped[str] = mapped_column(String(255), nullable=False)
    kategori: Mapped[str | None] = mapped_column(String(100))
    ukuran: Mapped[int | None] = mapped_column(Integer)


class Admin(TimestampedBase):
    __tablename__ = "admins"

    nama: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_active(self) -> bool:  # Flask-Login compatibility
        return True

    @property
    def is_anonymous(self) -> bool:
        return False

    def get_id(self) -> str:
        return str(self.id)
