"""Database bootstrap and demo-content CLI commands."""

import click
from datetime import date, datetime, timedelta
from flask.cli import with_appcontext
from sqlalchemy import func, select

from desa.extensions import db
from desa.models import (
    Document, Event, Gallery, News, NewsStatus, OrganizationMember, Service,
)
from desa.services.content import news_service, slugify
from desa.services.db import ensure_core_tables
from desa.services.site import get_settings, update_settings


DEMO_SETTINGS = {
    'nama_desa': 'Desa Maju Sejahtera',
    'slogan': 'Menuju Desa Modern dan Sejahtera',
    'alamat': 'Jl. Desa Maju No. 123, Kecamatan Sejahtera, Kabupaten Makmur, Provinsi Jaya 12345',
    'logo': '/assets/logo-desa.png',
    'hero_image': '/assets/hero-village.jpg',
    'deskripsi': (
        'Desa Maju Sejahtera adalah desa yang terletak di kawasan strategis dengan potensi '
        'alam yang melimpah.'
    ),
}

DEMO_NEWS = [
    ('Pembangunan Jalan Desa Selesai',
     '<p>Pembangunan jalan desa sepanjang 2 km telah selesai dilaksanakan.</p>',
     '/assets/news/jalan-desa.jpg', date(2024, 1, 15), 'Admin Desa'),
    ('Musyawarah Desa Bahas APBDesa 2024',
     '<p>Musyawarah Desa untuk membahas APBDesa tahun 2024 telah dilaksanakan di Balai Desa.</p>',
     '/assets/news/musdes.jpg', date(2024, 2, 10), 'Sekretaris Desa'),
    ('Pelatihan UMKM untuk Ibu-Ibu PKK',
     '<p>Desa mengadakan pelatihan UMKM bekerjasama dengan Dinas Koperasi dan UMKM Kabupaten.</p>',
     '/assets/news/pelatihan-umkm.jpg', date(2024, 2, 20), 'Admin Desa'),
]

DEMO_GALLERY = [
    ('Kegiatan Gotong Royong', 'Masyarakat bergotong royong membersihkan lingkungan desa',
     '/assets/gallery/gotong-royong.jpg', 'Kegiatan', date(2024, 1, 20)),
    ('Pemandangan Sawah', 'Hamparan sawah hijau yang indah di desa',
     '/assets/gallery/sawah.jpg', 'Pemandangan', date(2024, 1, 25)),
    ('Balai Desa', 'Gedung balai desa yang baru direnovasi',
     '/assets/gallery/balai-desa.jpg', 'Infrastruktur', date(2024, 2, 1)),
]

DEMO_EVENTS = [
    ('Rapat Koordinasi BPD', 'Rapat koordinasi antara BPD dan perangkat desa',
     'Balai Desa', '/assets/events/rapat-bpd.jpg', timedelta(days=7, hours=9)),
    ('Senam Sehat Bersama', 'Kegiatan senam sehat untuk semua warga',
     'Lapangan Desa', '/assets/events/senam.jpg', timedelta(days=12, hours=6, minutes=30)),
]

DEMO_MEMBERS = [
    ('Budi Santoso', 'Kepala Desa', '/assets/organization/kepala-desa.jpg'),
    ('Siti Aminah', 'Sekretaris Desa', '/assets/organization/sekretaris.jpg'),
    ('Ahmad Wijaya', 'Bendahara Desa', '/assets/organization/bendahara.jpg'),
]

DEMO_SERVICES = [
    ('Surat Keterangan Tidak Mampu', 'Surat keterangan untuk warga yang tidak mampu secara ekonomi',
     'KTP, KK, Surat Pernyataan Tidak Mampu'),
    ('Surat Keterangan Domisili', 'Surat keterangan tempat tinggal warga',
     'KTP, KK, Surat Pengantar RT/RW'),
    ('Surat Pengantar SKCK', 'Surat pengantar pembuatan SKCK di kepolisian',
     'KTP, KK, Pas Foto 4x6'),
]

DEMO_DOCUMENTS = [
    ('Peraturan Desa tentang APBDesa 2024', 'Peraturan desa tentang anggaran pendapatan dan belanja desa',
     '/assets/documents/perdes-apbdesa-2024.pdf', 'Peraturan', 524288),
    ('Formulir Permohonan Layanan', 'Formulir umum permohonan layanan administrasi',
     '/assets/documents/formulir-permohonan.pdf', 'Formulir', 102400),
]


@click.command('db-init')
@with_appcontext
def db_init():
    """Create any missing tables (idempotent)."""
    if ensure_core_tables():
        click.echo(click.style('Tables created.', fg='green'))
    else:
        click.echo('All tables already exist.')


@click.group('seed')
def seed_commands():
    """Demo content commands."""
    pass


@seed_commands.command('demo')
@click.option('--force', is_flag=True, help='Seed even when content already exists')
@with_appcontext
def seed_demo(force):
    """Seed demo settings and content.

    Example:
        flask seed demo
    """
    ensure_core_tables()

    existing = news_service.count()
    if existing and not force:
        click.echo(click.style('Content already present; use --force to add demo content anyway.', fg='yellow'))
        return

    if get_settings() is None or force:
        update_settings(DEMO_SETTINGS)
        click.echo('Settings saved')

    for judul, konten, gambar, tanggal, penulis in DEMO_NEWS:
        slug = slugify(judul)
        if db.session.execute(select(News).where(News.slug == slug)).scalar_one_or_none():
            continue
        db.session.add(News(
            judul=judul, slug=slug, konten=konten, gambar=gambar,
            tanggal=tanggal, penulis=penulis, status=NewsStatus.PUBLISHED,
        ))

    for judul, deskripsi, gambar, kategori, tanggal in DEMO_GALLERY:
        db.session.add(Gallery(judul=judul, deskripsi=deskripsi, gambar=gambar, kategori=kategori, tanggal=tanggal))

    today = datetime.combine(date.today(), datetime.min.time())
    for judul, deskripsi, lokasi, gambar, offset in DEMO_EVENTS:
        db.session.add(Event(judul=judul, deskripsi=deskripsi, lokasi=lokasi, gambar=gambar, tanggal=today + offset))

    start = db.session.execute(select(func.max(OrganizationMember.urutan))).scalar() or 0
    for position, (nama, jabatan, foto) in enumerate(DEMO_MEMBERS, start=start + 1):
        db.session.add(OrganizationMember(nama=nama, jabatan=jabatan, foto=foto, urutan=position))

    for nama, deskripsi, persyaratan in DEMO_SERVICES:
        db.session.add(Service(nama=nama, deskripsi=deskripsi, persyaratan=persyaratan))

    for judul, deskripsi, file_path, kategori, ukuran in DEMO_DOCUMENTS:
        db.session.add(Document(judul=judul, deskripsi=deskripsi, file_path=file_path, kategori=kategori, ukuran=ukuran))

    db.session.commit()

    click.echo(click.style('Demo content seeded!', fg='green'))
    click.echo(f'  News: {len(DEMO_NEWS)}')
    click.echo(f'  Gallery: {len(DEMO_GALLERY)}')
    click.echo(f'  Events: {len(DEMO_EVENTS)}')
    click.echo(f'  Organization: {len(DEMO_MEMBERS)}')
    click.echo(f'  Services: {len(DEMO_SERVICES)}')
    click.echo(f'  Documents: {len(DEMO_DOCUMENTS)}')
