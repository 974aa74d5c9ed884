"""initial desa schema

Revision ID: initial_desa_schema
Revises:
Create Date: 2026-10-18 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'initial_desa_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade():
    op.create_table(
        'desa_settings',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('nama_desa', sa.String(length=255), nullable=False),
        sa.Column('slogan', sa.Text(), nullable=True),
        sa.Column('alamat', sa.Text(), nullable=True),
        sa.Column('logo', sa.String(length=255), nullable=True),
        sa.Column('hero_image', sa.String(length=255), nullable=True),
        sa.Column('primary_color', sa.String(length=7), nullable=True),
        sa.Column('secondary_color', sa.String(length=7), nullable=True),
        sa.Column('deskripsi', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'news',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('judul', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('konten', sa.Text(), nullable=False),
        sa.Column('gambar', sa.String(length=255), nullable=True),
        sa.Column('tanggal', sa.Date(), nullable=False),
        sa.Column('penulis', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='draft'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )
    op.create_index('idx_news_status', 'news', ['status'], unique=False)
    op.create_index('idx_news_tanggal', 'news', ['tanggal'], unique=False)

    op.create_table(
        'galleries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('judul', sa.String(length=255), nullable=False),
        sa.Column('deskripsi', sa.Text(), nullable=True),
        sa.Column('gambar', sa.String(length=255), nullable=False),
        sa.Column('kategori', sa.String(length=100), nullable=True),
        sa.Column('tanggal', sa.Date(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_galleries_kategori', 'galleries', ['kategori'], unique=False)

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('judul', sa.String(length=255), nullable=False),
        sa.Column('deskripsi', sa.Text(), nullable=True),
        sa.Column('tanggal', sa.DateTime(), nullable=False),
        sa.Column('lokasi', sa.String(length=255), nullable=True),
        sa.Column('gambar', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_events_tanggal', 'events', ['tanggal'], unique=False)

    op.create_table(
        'organisasi',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nama', sa.String(length=255), nullable=False),
        sa.Column('jabatan', sa.String(length=255), nullable=False),
        sa.Column('foto', sa.String(length=255), nullable=True),
        sa.Column('urutan', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_organisasi_urutan', 'organisasi', ['urutan'], unique=False)

    op.create_table(
        'layanan',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nama', sa.String(length=255), nullable=False),
        sa.Column('deskripsi', sa.Text(), nullable=True),
        sa.Column('persyaratan', sa.Text(), nullable=True),
        sa.Column('template_dokumen', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'pengajuan_layanan',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('layanan_id', sa.Integer(), nullable=False),
        sa.Column('nomor_pengajuan', sa.String(length=50), nullable=False),
        sa.Column('nama', sa.String(length=255), nullable=False),
        sa.Column('nik', sa.String(length=16), nullable=False),
        sa.Column('file_pendukung', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=8), nullable=False, server_default='pending'),
        sa.Column('catatan', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['layanan_id'], ['layanan.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('nomor_pengajuan')
    )
    op.create_index('idx_pengajuan_status', 'pengajuan_layanan', ['status'], unique=False)
    op.create_index('idx_pengajuan_nomor', 'pengajuan_layanan', ['nomor_pengajuan'], unique=False)

    op.create_table(
        'dokumen',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('judul', sa.String(length=255), nullable=False),
        sa.Column('deskripsi', sa.Text(), nullable=True),
        sa.Column('file_path', sa.String(length=255), nullable=False),
        sa.Column('kategori', sa.String(length=100), nullable=True),
        sa.Column('ukuran', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_dokumen_kategori', 'dokumen', ['kategori'], unique=False)

    op.create_table(
        'admins',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nama', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )


def downgrade():
    op.drop_table('admins')
    op.drop_index('idx_dokumen_kategori', table_name='dokumen')
    op.drop_table('dokumen')
    op.drop_index('idx_pengajuan_nomor', table_name='pengajuan_layanan')
    op.drop_index('idx_pengajuan_status', table_name='pengajuan_layanan')
    op.drop_table('pengajuan_layanan')
    op.drop_table('layanan')
    op.drop_index('idx_organisasi_urutan', table_name='organisasi')
    op.drop_table('organisasi')
    op.drop_index('idx_events_tanggal', table_name='events')
    op.drop_table('events')
    op.drop_index('idx_galleries_kategori', table_name='galleries')
    op.drop_table('galleries')
    op.drop_index('idx_news_tanggal', table_name='news')
    op.drop_index('idx_news_status', table_name='news')
    op.drop_table('news')
    op.drop_table('desa_settings')
