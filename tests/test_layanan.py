"""
Village services and citizen submissions.
"""

from datetime import date

import pytest

from desa.extensions import db
from desa.models import Service, ServiceSubmission, SubmissionStatus
from desa.services.layanan import (
    SUBMISSION_NUMBER_PATTERN,
    generate_submission_number,
    is_valid_nik,
    normalize_status,
    submission_service,
)
from desa.services.statistics import get_statistics, get_submission_breakdown

NIK = '3201234567890001'


@pytest.fixture()
def layanan_id(app):
    with app.app_context():
        service = Service(
            nama='Surat Keterangan Domisili',
            deskripsi='Surat keterangan tempat tinggal warga',
            persyaratan='KTP, KK, Surat Pengantar RT/RW',
        )
        db.session.add(service)
        db.session.commit()
        return service.id


def _submit(client, layanan_id, **overrides):
    payload = {'layanan_id': layanan_id, 'nama': 'Budi Santoso', 'nik': NIK}
    payload.update(overrides)
    return client.post('/api/service-submissions', json=payload)


# ==================== HELPERS ====================

class TestSubmissionHelpers:

    def test_submission_number_format(self):
        nomor = generate_submission_number(today=date(2024, 3, 7))

        assert SUBMISSION_NUMBER_PATTERN.match(nomor)
        assert nomor.startswith('240307-')

    def test_submission_numbers_vary(self):
        numbers = {generate_submission_number() for _ in range(20)}

        assert len(numbers) > 1

    @pytest.mark.parametrize('nik, valid', [
        (NIK, True),
        ('320123456789000', False),
        ('32012345678900012', False),
        ('32012345678900AB', False),
        ('٣' * 16, False),
        ('', False),
        (None, False),
    ])
    def test_nik(self, nik, valid):
        assert is_valid_nik(nik) is valid

    @pytest.mark.parametrize('raw, stored', [
        ('pending', 'pending'),
        ('diproses', 'diproses'),
        ('processing', 'diproses'),
        ('DONE', 'selesai'),
        ('rejected', 'ditolak'),
        ('archived', None),
        (3, None),
    ])
    def test_normalize_status(self, raw, stored):
        assert normalize_status(raw) == stored


# ==================== CATALOG ====================

class TestServiceCatalog:

    def test_public_list_sorted_by_name(self, app, client, layanan_id):
        with app.app_context():
            db.session.add(Service(nama='Surat Pengantar SKCK'))
            db.session.add(Service(nama='Akta Kelahiran'))
            db.session.commit()

        body = client.get('/api/services').get_json()

        assert [s['nama'] for s in body['data']] == [
            'Akta Kelahiran', 'Surat Keterangan Domisili', 'Surat Pengantar SKCK',
        ]
        assert body['total'] == 3

    def test_create_requires_name(self, client, auth_headers):
        response = client.post('/api/services', headers=auth_headers, json={'deskripsi': 'Tanpa nama'})

        assert response.status_code == 400

    def test_delete_service_removes_its_submissions(self, app, client, auth_headers, layanan_id):
        for _ in range(3):
            assert _submit(client, layanan_id).status_code == 201

        response = client.delete(f'/api/services/{layanan_id}', headers=auth_headers)

        assert response.status_code == 200
        with app.app_context():
            remaining = db.session.execute(
                db.select(db.func.count()).select_from(ServiceSubmission)
            ).scalar_one()
            assert remaining == 0

    def test_database_cascade_without_orm(self, app, layanan_id):
        with app.app_context():
            db.session.add(ServiceSubmission(
                layanan_id=layanan_id,
                nomor_pengajuan=generate_submission_number(),
                nama='Siti',
                nik=NIK,
            ))
            db.session.commit()

            db.session.execute(db.delete(Service).where(Service.id == layanan_id))
            db.session.commit()

            assert db.session.execute(db.select(ServiceSubmission)).first() is None


# ==================== SUBMISSIONS ====================

class TestSubmissions:

    def test_submit_creates_pending_submission(self, client, layanan_id):
        response = _submit(client, layanan_id, status='selesai', catatan='sudah beres')

        assert response.status_code == 201
        body = response.get_json()
        assert body['message'] == 'Pengajuan berhasil disubmit'
        data = body['data']
        assert SUBMISSION_NUMBER_PATTERN.match(data['nomor_pengajuan'])
        assert data['nomor_pengajuan'].startswith(date.today().strftime('%y%m%d'))
        assert data['status'] == 'pending'
        assert data['catatan'] is None
        assert data['layanan_nama'] == 'Surat Keterangan Domisili'

    def test_invalid_nik_is_rejected(self, client, layanan_id):
        response = _submit(client, layanan_id, nik='12345')

        assert response.status_code == 400
        assert response.get_json()['errors']['nik'] == 'NIK must be 16 digits'

    def test_non_ascii_digits_in_nik_are_rejected(self, client, layanan_id):
        response = _submit(client, layanan_id, nik='٣' * 16)

        assert response.status_code == 400
        assert 'nik' in response.get_json()['errors']

    def test_unknown_service_is_not_found(self, client, layanan_id):
        response = _submit(client, layanan_id + 100)

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Layanan not found'

    def test_missing_fields(self, client):
        response = client.post('/api/service-submissions', json={})

        assert response.status_code == 400
        assert set(response.get_json()['errors']) == {'layanan_id', 'nama', 'nik'}

    def test_submission_service_rejects_unknown_service(self, app, layanan_id):
        with app.app_context():
            submission, error = submission_service.submit({
                'layanan_id': layanan_id + 1,
                'nama': 'Budi',
                'nik': NIK,
            })

            assert submission is None
            assert error == 'Layanan not found'

    def test_track_by_number_hides_nik(self, client, layanan_id):
        nomor = _submit(client, layanan_id).get_json()['data']['nomor_pengajuan']

        response = client.get(f'/api/service-submissions/track/{nomor.lower()}')

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['nomor_pengajuan'] == nomor
        assert data['status'] == 'pending'
        assert 'nik' not in data

    def test_track_unknown_number(self, client):
        response = client.get('/api/service-submissions/track/240101-XXXXXX')

        assert response.status_code == 404

    def test_listing_requires_admin(self, client):
        assert client.get('/api/service-submissions').status_code == 401

    def test_update_status_with_alias(self, client, auth_headers, layanan_id):
        submission = _submit(client, layanan_id).get_json()['data']

        response = client.put(
            f"/api/service-submissions/{submission['id']}/status",
            headers=auth_headers,
            json={'status': 'processing', 'catatan': 'Sedang diverifikasi'},
        )

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['status'] == 'diproses'
        assert data['catatan'] == 'Sedang diverifikasi'

    def test_any_status_may_follow_any_other(self, client, auth_headers, layanan_id):
        submission_id = _submit(client, layanan_id).get_json()['data']['id']
        url = f'/api/service-submissions/{submission_id}/status'

        for status in ('selesai', 'pending', 'ditolak', 'diproses'):
            response = client.put(url, headers=auth_headers, json={'status': status})
            assert response.get_json()['data']['status'] == status

    def test_update_status_rejects_unknown_value(self, client, auth_headers, layanan_id):
        submission_id = _submit(client, layanan_id).get_json()['data']['id']

        response = client.put(
            f'/api/service-submissions/{submission_id}/status',
            headers=auth_headers,
            json={'status': 'archived'},
        )

        assert response.status_code == 400

    def test_update_status_unknown_submission(self, client, auth_headers):
        response = client.put(
            '/api/service-submissions/999/status',
            headers=auth_headers,
            json={'status': 'selesai'},
        )

        assert response.status_code == 404

    def test_admin_list_filters(self, client, auth_headers, layanan_id):
        ids = [_submit(client, layanan_id).get_json()['data']['id'] for _ in range(3)]
        client.put(f'/api/service-submissions/{ids[0]}/status', headers=auth_headers, json={'status': 'selesai'})

        done = client.get('/api/service-submissions?status=done', headers=auth_headers).get_json()
        pending = client.get('/api/service-submissions?status=pending', headers=auth_headers).get_json()
        by_service = client.get(
            f'/api/service-submissions?layanan_id={layanan_id}', headers=auth_headers
        ).get_json()

        assert done['total'] == 1
        assert done['data'][0]['id'] == ids[0]
        assert pending['total'] == 2
        assert by_service['total'] == 3
        assert by_service['data'][0]['nik'] == NIK

    def test_admin_list_rejects_unknown_status(self, client, auth_headers):
        response = client.get('/api/service-submissions?status=archived', headers=auth_headers)

        assert response.status_code == 400


# ==================== STATISTICS ====================

class TestStatistics:

    def test_counts_and_breakdown(self, app, client, auth_headers, layanan_id):
        ids = [_submit(client, layanan_id).get_json()['data']['id'] for _ in range(2)]
        client.put(f'/api/service-submissions/{ids[0]}/status', headers=auth_headers, json={'status': 'ditolak'})

        stats = client.get('/api/statistics', headers=auth_headers).get_json()['data']
        breakdown = client.get('/api/statistics/submissions', headers=auth_headers).get_json()['data']

        assert stats == {'news': 0, 'gallery': 0, 'events': 0, 'submissions': 2, 'documents': 0}
        assert breakdown == {'pending': 1, 'diproses': 0, 'selesai': 0, 'ditolak': 1}

    def test_empty_database(self, app):
        with app.app_context():
            assert set(get_statistics().values()) == {0}
            assert get_submission_breakdown() == {s.value: 0 for s in SubmissionStatus}

    def test_statistics_require_admin(self, client):
        assert client.get('/api/statistics').status_code == 401
