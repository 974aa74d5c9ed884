"""
Content API tests: news, gallery, events and documents.
"""

from datetime import date, datetime, timedelta

import pytest

from desa.extensions import db
from desa.models import Event, News, NewsStatus
from desa.services.content import event_service, news_service, slugify
from desa.services.crud import normalize_paging


def _add_news(count, status=NewsStatus.PUBLISHED, start=date(2024, 1, 1)):
    for i in range(count):
        db.session.add(News(
            judul=f'Berita {i}',
            slug=f'berita-{status.value}-{i}',
            konten='<p>Isi</p>',
            penulis='Admin Desa',
            tanggal=start + timedelta(days=i),
            status=status,
        ))
    db.session.commit()


# ==================== SLUGS ====================

class TestSlugify:

    @pytest.mark.parametrize('title, slug', [
        ('Jalan Desa Selesai!', 'jalan-desa-selesai'),
        ('Musyawarah Desa Bahas APBDesa 2024', 'musyawarah-desa-bahas-apbdesa-2024'),
        ('  Pelatihan -- UMKM  ', 'pelatihan-umkm'),
        ('Ibu-Ibu PKK', 'ibu-ibu-pkk'),
        ('!!!', ''),
    ])
    def test_slugify(self, title, slug):
        assert slugify(title) == slug


# ==================== PAGINATION ====================

class TestPagination:

    def test_normalize_paging_clamps(self):
        assert normalize_paging('0', '500') == (1, 100)
        assert normalize_paging('abc', None) == (1, 10)
        assert normalize_paging(3, 0) == (3, 1)

    def test_twenty_five_items_in_pages_of_ten(self, app, client):
        with app.app_context():
            _add_news(25)

        first = client.get('/api/news?page=1&limit=10').get_json()
        last = client.get('/api/news?page=3&limit=10').get_json()

        assert first['total'] == 25
        assert first['totalPages'] == 3
        assert len(first['data']) == 10
        assert last['page'] == 3
        assert len(last['data']) == 5

    def test_page_past_the_end_is_empty(self, app, client):
        with app.app_context():
            _add_news(3)

        body = client.get('/api/news?page=9').get_json()

        assert body['success'] is True
        assert body['data'] == []
        assert body['total'] == 3

    def test_newest_news_first(self, app, client):
        with app.app_context():
            _add_news(3)

        body = client.get('/api/news').get_json()

        assert [item['tanggal'] for item in body['data']] == ['2024-01-03', '2024-01-02', '2024-01-01']


# ==================== NEWS ====================

class TestNews:

    def test_public_list_hides_drafts(self, app, client):
        with app.app_context():
            _add_news(2)
            _add_news(3, status=NewsStatus.DRAFT)

        body = client.get('/api/news?status=all').get_json()

        assert body['total'] == 2
        assert all(item['status'] == 'published' for item in body['data'])

    def test_admin_can_list_drafts(self, app, client, auth_headers):
        with app.app_context():
            _add_news(2)
            _add_news(3, status=NewsStatus.DRAFT)

        drafts = client.get('/api/news?status=draft', headers=auth_headers).get_json()
        everything = client.get('/api/news?status=all', headers=auth_headers).get_json()

        assert drafts['total'] == 3
        assert everything['total'] == 5

    def test_admin_rejects_unknown_status_filter(self, client, auth_headers):
        response = client.get('/api/news?status=archived', headers=auth_headers)

        assert response.status_code == 400

    def test_create_derives_slug(self, client, auth_headers):
        response = client.post('/api/news', headers=auth_headers, json={
            'judul': 'Jalan Desa Selesai!',
            'konten': '<p>Pembangunan jalan desa selesai.</p>',
            'status': 'published',
        })

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['slug'] == 'jalan-desa-selesai'
        assert data['penulis'] == 'Admin Desa'
        assert data['tanggal'] == date.today().isoformat()

        detail = client.get('/api/news/jalan-desa-selesai')
        assert detail.status_code == 200
        assert detail.get_json()['data']['judul'] == 'Jalan Desa Selesai!'

    def test_new_news_defaults_to_draft(self, client, auth_headers):
        response = client.post('/api/news', headers=auth_headers, json={
            'judul': 'Rencana Kerja',
            'konten': 'Isi',
        })

        assert response.get_json()['data']['status'] == 'draft'
        assert client.get('/api/news/rencana-kerja').status_code == 404
        assert client.get('/api/news/rencana-kerja', headers=auth_headers).status_code == 200

    def test_duplicate_slug_conflicts(self, client, auth_headers):
        payload = {'judul': 'Musyawarah Desa', 'konten': 'Isi'}
        client.post('/api/news', headers=auth_headers, json=payload)

        response = client.post('/api/news', headers=auth_headers, json=dict(payload, judul='Musyawarah  Desa!'))

        assert response.status_code == 409

    def test_update_title_recomputes_slug(self, client, auth_headers):
        created = client.post('/api/news', headers=auth_headers, json={
            'judul': 'Judul Lama',
            'konten': 'Isi',
        }).get_json()['data']

        response = client.put(f"/api/news/{created['id']}", headers=auth_headers, json={
            'judul': 'Judul Baru',
        })

        data = response.get_json()['data']
        assert response.status_code == 200
        assert data['slug'] == 'judul-baru'
        assert data['konten'] == 'Isi'

    def test_create_validates_fields(self, client, auth_headers):
        response = client.post('/api/news', headers=auth_headers, json={
            'judul': 'Tanpa Isi',
            'status': 'archived',
            'tanggal': '15-01-2024',
        })

        assert response.status_code == 400
        errors = response.get_json()['errors']
        assert set(errors) == {'konten', 'status', 'tanggal'}

    def test_date_with_trailing_digits_is_rejected(self, client, auth_headers):
        response = client.post('/api/news', headers=auth_headers, json={
            'judul': 'Tanggal Aneh',
            'konten': 'Isi',
            'tanggal': '2024-01-0199',
        })

        assert response.status_code == 400
        assert set(response.get_json()['errors']) == {'tanggal'}

    def test_date_accepts_full_timestamp(self, client, auth_headers):
        response = client.post('/api/news', headers=auth_headers, json={
            'judul': 'Tanggal Lengkap',
            'konten': 'Isi',
            'tanggal': '2024-01-15T08:00:00',
        })

        assert response.status_code == 201
        assert response.get_json()['data']['tanggal'].startswith('2024-01-15')

    def test_writes_require_admin(self, client):
        assert client.post('/api/news', json={'judul': 'X', 'konten': 'Y'}).status_code == 401
        assert client.put('/api/news/1', json={'judul': 'X'}).status_code == 401
        assert client.delete('/api/news/1').status_code == 401

    def test_delete_and_missing(self, client, auth_headers):
        created = client.post('/api/news', headers=auth_headers, json={
            'judul': 'Hapus Saya',
            'konten': 'Isi',
        }).get_json()['data']

        assert client.delete(f"/api/news/{created['id']}", headers=auth_headers).status_code == 200
        response = client.delete(f"/api/news/{created['id']}", headers=auth_headers)
        assert response.status_code == 404
        assert response.get_json()['message'] == 'News not found'


# ==================== GALLERY ====================

class TestGallery:

    def test_gallery_crud_and_categories(self, client, auth_headers):
        for judul, kategori in [('Sawah', 'Pemandangan'), ('Kerja Bakti', 'Kegiatan'), ('Sungai', 'Pemandangan')]:
            response = client.post('/api/galleries', headers=auth_headers, json={
                'judul': judul,
                'gambar': f'/uploads/gallery/{judul}.jpg',
                'kategori': kategori,
            })
            assert response.status_code == 201

        categories = client.get('/api/galleries/categories').get_json()['data']
        filtered = client.get('/api/galleries?kategori=Pemandangan').get_json()

        assert categories == ['Kegiatan', 'Pemandangan']
        assert filtered['total'] == 2
        assert filtered['limit'] == 12

    def test_gallery_requires_image(self, client, auth_headers):
        response = client.post('/api/galleries', headers=auth_headers, json={'judul': 'Tanpa Gambar'})

        assert response.status_code == 400
        assert 'gambar' in response.get_json()['errors']


# ==================== EVENTS ====================

class TestEvents:

    def test_upcoming_and_past(self, app, client):
        now = datetime.now()
        with app.app_context():
            for judul, offset in [('Lalu', -3), ('Besok', 1), ('Lusa', 2), ('Kemarin', -1)]:
                db.session.add(Event(judul=judul, tanggal=now + timedelta(days=offset)))
            db.session.commit()

        upcoming = client.get('/api/events?when=upcoming').get_json()['data']
        past = client.get('/api/events?when=past').get_json()['data']

        assert [e['judul'] for e in upcoming] == ['Besok', 'Lusa']
        assert all(e['is_upcoming'] for e in upcoming)
        assert [e['judul'] for e in past] == ['Kemarin', 'Lalu']
        assert not any(e['is_upcoming'] for e in past)

    def test_unknown_filter_is_rejected(self, client):
        assert client.get('/api/events?when=someday').status_code == 400

    def test_upcoming_is_computed_at_read_time(self, app):
        with app.app_context():
            event = Event(judul='Senam', tanggal=datetime(2030, 5, 1, 6, 30))
            db.session.add(event)
            db.session.commit()

            assert event.is_upcoming(now=datetime(2030, 4, 30))
            assert not event.is_upcoming(now=datetime(2030, 5, 2))
            assert event_service.list_events('past', now=datetime(2030, 5, 2))[0].id == event.id

    def test_event_datetime_validation(self, client, auth_headers):
        response = client.post('/api/events', headers=auth_headers, json={
            'judul': 'Rapat',
            'tanggal': 'besok pagi',
        })

        assert response.status_code == 400
        assert 'tanggal' in response.get_json()['errors']

    def test_create_event_with_iso_datetime(self, client, auth_headers):
        response = client.post('/api/events', headers=auth_headers, json={
            'judul': 'Rapat BPD',
            'tanggal': '2030-01-15T09:00',
            'lokasi': 'Balai Desa',
        })

        assert response.status_code == 201
        assert response.get_json()['data']['tanggal'] == '2030-01-15T09:00:00'


# ==================== DOCUMENTS ====================

class TestDocuments:

    def test_document_size_label(self, client, auth_headers):
        response = client.post('/api/documents', headers=auth_headers, json={
            'judul': 'Perdes APBDesa',
            'file_path': '/uploads/documents/perdes.pdf',
            'kategori': 'Peraturan',
            'ukuran': 1536,
        })

        assert response.status_code == 201
        assert response.get_json()['data']['ukuran_label'] == '1.5 KB'

    def test_negative_size_is_rejected(self, client, auth_headers):
        response = client.post('/api/documents', headers=auth_headers, json={
            'judul': 'Perdes',
            'file_path': '/uploads/documents/perdes.pdf',
            'ukuran': -1,
        })

        assert response.status_code == 400

    def test_news_service_get_by_slug(self, app):
        with app.app_context():
            _add_news(1)
            assert news_service.get_by_slug('berita-published-0').judul == 'Berita 0'
            assert news_service.get_by_slug('tidak-ada') is None
