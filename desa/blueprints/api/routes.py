"""JSON API blueprint for the public site and the admin back office."""

from __future__ import annotations

from flask import Blueprint, current_app, request
from flask_login import current_user

from desa.auth import admin_required, is_admin
from desa.blueprints.common.responses import (
    error_status,
    fail,
    json_payload,
    listing,
    ok,
    paginated,
)
from desa.extensions import limiter
from desa.models import (
    Document,
    Event,
    Gallery,
    News,
    NewsStatus,
    OrganizationMember,
    Service,
    ServiceSubmission,
)
from desa.security import public_submission_rate_limit
from desa.services.content import (
    STATUS_ALL,
    document_service,
    event_service,
    gallery_service,
    news_service,
    organization_service,
)
from desa.services.db import check_connection
from desa.services.layanan import (
    normalize_status,
    service_catalog,
    submission_service,
)
from desa.services.site import get_settings, serialize_settings, update_settings
from desa.services.statistics import get_statistics, get_submission_breakdown
from desa.services.uploads import (
    UploadError,
    delete_upload,
    format_file_size,
    save_upload,
)

api_bp = Blueprint('api', __name__)

GALLERY_PAGE_LIMIT = 12
DOCUMENT_PAGE_LIMIT = 20
SUBMISSION_PAGE_LIMIT = 20


def _iso(value):
    return value.isoformat() if value else None


def serialize_news(news: News) -> dict:
    return {
        'id': news.id,
        'judul': news.judul,
        'slug': news.slug,
        'konten': news.konten,
        'gambar': news.gambar,
        'tanggal': _iso(news.tanggal),
        'penulis': news.penulis,
        'status': news.status.value if hasattr(news.status, 'value') else news.status,
        'created_at': _iso(news.created_at),
        'updated_at': _iso(news.updated_at),
    }


def serialize_gallery(item: Gallery) -> dict:
    return {
        'id': item.id,
        'judul': item.judul,
        'deskripsi': item.deskripsi,
        'gambar': item.gambar,
        'kategori': item.kategori,
        'tanggal': _iso(item.tanggal),
        'created_at': _iso(item.created_at),
        'updated_at': _iso(item.updated_at),
    }


def serialize_event(event: Event) -> dict:
    return {
        'id': event.id,
        'judul': event.judul,
        'deskripsi': event.deskripsi,
        'tanggal': _iso(event.tanggal),
        'lokasi': event.lokasi,
        'gambar': event.gambar,
        'is_upcoming': event.is_upcoming(),
        'created_at': _iso(event.created_at),
        'updated_at': _iso(event.updated_at),
    }


def serialize_member(member: OrganizationMember) -> dict:
    return {
        'id': member.id,
        'nama': member.nama,
        'jabatan': member.jabatan,
        'foto': member.foto,
        'urutan': member.urutan,
        'created_at': _iso(member.created_at),
        'updated_at': _iso(member.updated_at),
    }


def serialize_service(service: Service) -> dict:
    return {
        'id': service.id,
        'nama': service.nama,
        'deskripsi': service.deskripsi,
        'persyaratan': service.persyaratan,
        'template_dokumen': service.template_dokumen,
        'created_at': _iso(service.created_at),
        'updated_at': _iso(service.updated_at),
    }


def serialize_submission(submission: ServiceSubmission) -> dict:
    return {
        'id': submission.id,
        'layanan_id': submission.layanan_id,
        'layanan_nama': submission.layanan.nama if submission.layanan else None,
        'nomor_pengajuan': submission.nomor_pengajuan,
        'nama': submission.nama,
        'nik': submission.nik,
        'file_pendukung': submission.file_pendukung,
        'status': submission.status.value if hasattr(submission.status, 'value') else submission.status,
        'catatan': submission.catatan,
        'created_at': _iso(submission.created_at),
        'updated_at': _iso(submission.updated_at),
    }


def serialize_submission_tracking(submission: ServiceSubmission) -> dict:
    """Public status view; leaves out the applicant's NIK and files."""
    return {
        'nomor_pengajuan': submission.nomor_pengajuan,
        'layanan_nama': submission.layanan.nama if submission.layanan else None,
        'status': submission.status.value,
        'catatan': submission.catatan,
        'created_at': _iso(submission.created_at),
        'updated_at': _iso(submission.updated_at),
    }


def serialize_document(document: Document) -> dict:
    return {
        'id': document.id,
        'judul': document.judul,
        'deskripsi': document.deskripsi,
        'file_path': document.file_path,
        'kategori': document.kategori,
        'ukuran': document.ukuran,
        'ukuran_label': format_file_size(document.ukuran),
        'created_at': _iso(document.created_at),
        'updated_at': _iso(document.updated_at),
    }


def _create(service, payload, serializer, message):
    errors = service.validate(payload)
    if errors:
        return fail(next(iter(errors.values())), 400, errors)
    instance, error = service.create(payload)
    if error:
        return fail(error, error_status(error))
    return ok(serializer(instance), message, 201)


def _update(service, object_id, payload, serializer, message):
    if service.get_by_id(object_id) is None:
        return fail(service.not_found_message, 404)
    errors = service.validate(payload, partial=True)
    if errors:
        return fail(next(iter(errors.values())), 400, errors)
    instance, error = service.update(object_id, payload)
    if error:
        return fail(error, error_status(error))
    return ok(serializer(instance), message)


def _delete(service, object_id, message):
    deleted, error = service.delete(object_id)
    if not deleted:
        return fail(error, error_status(error))
    return ok(True, message)


def _detail(service, object_id, serializer):
    instance = service.get_by_id(object_id)
    if instance is None:
        return fail(service.not_found_message, 404)
    return ok(serializer(instance))


# ============= Health =============

@api_bp.route('/health', methods=['GET'])
def health():
    if not check_connection():
        return fail('Database unavailable', 503)
    return ok({'database': 'ok'})


# ============= Settings =============

@api_bp.route('/settings', methods=['GET'])
def settings_detail():
    return ok(serialize_settings(get_settings()))


@api_bp.route('/settings', methods=['PUT'])
@admin_required
def settings_update():
    settings, error, errors = update_settings(json_payload())
    if error:
        return fail(error, 500 if not errors else 400, errors)
    return ok(serialize_settings(settings), 'Settings updated')


# ============= News =============

@api_bp.route('/news', methods=['GET'])
def news_list():
    status = NewsStatus.PUBLISHED.value
    if is_admin():
        status = request.args.get('status') or NewsStatus.PUBLISHED.value
        valid = {s.value for s in NewsStatus} | {STATUS_ALL}
        if status not in valid:
            return fail("status must be 'published', 'draft' or 'all'", 400)
    result = news_service.list_news(
        page=request.args.get('page', 1),
        limit=request.args.get('limit', 10),
        status=status,
    )
    return paginated(result, serialize_news)


@api_bp.route('/news/<slug>', methods=['GET'])
def news_by_slug(slug):
    news = news_service.get_by_slug(slug)
    if news is None or (news.status != NewsStatus.PUBLISHED and not is_admin()):
        return fail(news_service.not_found_message, 404)
    return ok(serialize_news(news))


@api_bp.route('/news/id/<int:news_id>', methods=['GET'])
@admin_required
def news_detail(news_id):
    return _detail(news_service, news_id, serialize_news)


@api_bp.route('/news', methods=['POST'])
@admin_required
def news_create():
    payload = json_payload()
    if not payload.get('penulis'):
        payload['penulis'] = current_user.nama
    return _create(news_service, payload, serialize_news, 'News created')


@api_bp.route('/news/<int:news_id>', methods=['PUT'])
@admin_required
def news_update(news_id):
    return _update(news_service, news_id, json_payload(), serialize_news, 'News updated')


@api_bp.route('/news/<int:news_id>', methods=['DELETE'])
@admin_required
def news_delete(news_id):
    return _delete(news_service, news_id, 'News deleted')


# ============= Gallery =============

@api_bp.route('/galleries', methods=['GET'])
def gallery_list():
    result = gallery_service.list_page(
        page=request.args.get('page', 1),
        limit=request.args.get('limit', GALLERY_PAGE_LIMIT),
        filters={'kategori': request.args.get('kategori')},
    )
    return paginated(result, serialize_gallery)


@api_bp.route('/galleries/categories', methods=['GET'])
def gallery_categories():
    return ok(gallery_service.categories())


@api_bp.route('/galleries/<int:item_id>', methods=['GET'])
def gallery_detail(item_id):
    return _detail(gallery_service, item_id, serialize_gallery)


@api_bp.route('/galleries', methods=['POST'])
@admin_required
def gallery_create():
    return _create(gallery_service, json_payload(), serialize_gallery, 'Gallery item created')


@api_bp.route('/galleries/<int:item_id>', methods=['PUT'])
@admin_required
def gallery_update(item_id):
    return _update(gallery_service, item_id, json_payload(), serialize_gallery, 'Gallery item updated')


@api_bp.route('/galleries/<int:item_id>', methods=['DELETE'])
@admin_required
def gallery_delete(item_id):
    return _delete(gallery_service, item_id, 'Gallery item deleted')


# ============= Events =============

@api_bp.route('/events', methods=['GET'])
def event_list():
    when = request.args.get('when')
    if when not in (None, '', 'upcoming', 'past'):
        return fail("when must be 'upcoming' or 'past'", 400)
    return listing(event_service.list_events(when or None), serialize_event)


@api_bp.route('/events/<int:event_id>', methods=['GET'])
def event_detail(event_id):
    return _detail(event_service, event_id, serialize_event)


@api_bp.route('/events', methods=['POST'])
@admin_required
def event_create():
    return _create(event_service, json_payload(), serialize_event, 'Event created')


@api_bp.route('/events/<int:event_id>', methods=['PUT'])
@admin_required
def event_update(event_id):
    return _update(event_service, event_id, json_payload(), serialize_event, 'Event updated')


@api_bp.route('/events/<int:event_id>', methods=['DELETE'])
@admin_required
def event_delete(event_id):
    return _delete(event_service, event_id, 'Event deleted')


# ============= Organization =============

@api_bp.route('/organization', methods=['GET'])
def organization_list():
    return listing(organization_service.list_all(), serialize_member)


@api_bp.route('/organization', methods=['POST'])
@admin_required
def organization_create():
    return _create(organization_service, json_payload(), serialize_member, 'Member created')


@api_bp.route('/organization/<int:member_id>', methods=['PUT'])
@admin_required
def organization_update(member_id):
    return _update(organization_service, member_id, json_payload(), serialize_member, 'Member updated')


@api_bp.route('/organization/<int:member_id>', methods=['DELETE'])
@admin_required
def organization_delete(member_id):
    return _delete(organization_service, member_id, 'Member deleted')


@api_bp.route('/organization/<int:member_id>/move', methods=['POST'])
@admin_required
def organization_move(member_id):
    members, error = organization_service.move(member_id, json_payload().get('direction'))
    if error:
        return fail(error, error_status(error))
    return ok([serialize_member(m) for m in members], 'Order updated')


@api_bp.route('/organization/swap', methods=['POST'])
@admin_required
def organization_swap():
    payload = json_payload()
    try:
        first_id = int(payload.get('first_id'))
        second_id = int(payload.get('second_id'))
    except (TypeError, ValueError):
        return fail('first_id and second_id are required', 400)
    members, error = organization_service.swap(first_id, second_id)
    if error:
        return fail(error, error_status(error))
    return ok([serialize_member(m) for m in members], 'Order updated')


# ============= Services (layanan) =============

@api_bp.route('/services', methods=['GET'])
def service_list():
    return listing(service_catalog.list_all(), serialize_service)


@api_bp.route('/services/<int:service_id>', methods=['GET'])
def service_detail(service_id):
    return _detail(service_catalog, service_id, serialize_service)


@api_bp.route('/services', methods=['POST'])
@admin_required
def service_create():
    return _create(service_catalog, json_payload(), serialize_service, 'Layanan created')


@api_bp.route('/services/<int:service_id>', methods=['PUT'])
@admin_required
def service_update(service_id):
    return _update(service_catalog, service_id, json_payload(), serialize_service, 'Layanan updated')


@api_bp.route('/services/<int:service_id>', methods=['DELETE'])
@admin_required
def service_delete(service_id):
    # Submissions for the service go with it (ON DELETE CASCADE)
    return _delete(service_catalog, service_id, 'Layanan deleted')


# ============= Service submissions =============

@api_bp.route('/service-submissions', methods=['POST'])
@limiter.limit(public_submission_rate_limit)
def submission_create():
    if request.mimetype == 'multipart/form-data':
        payload = request.form.to_dict()
        upload = request.files.get('file_pendukung')
    else:
        payload = json_payload()
        upload = None

    errors = submission_service.validate(payload)
    if errors:
        return fail(next(iter(errors.values())), 400, errors)
    if service_catalog.get_by_id(payload['layanan_id']) is None:
        return fail(service_catalog.not_found_message, 404)

    if upload is not None and upload.filename:
        try:
            payload['file_pendukung'] = save_upload(upload, 'submissions')['path']
        except UploadError as exc:
            return fail(str(exc), 400, {'file_pendukung': str(exc)})

    submission, error = submission_service.submit(payload)
    if error:
        if upload is not None and payload.get('file_pendukung'):
            delete_upload(payload['file_pendukung'])
        return fail(error, error_status(error))
    return ok(serialize_submission(submission), 'Pengajuan berhasil disubmit', 201)


@api_bp.route('/service-submissions', methods=['GET'])
@admin_required
def submission_list():
    status = request.args.get('status')
    if status:
        status = normalize_status(status)
        if status is None:
            return fail('Unknown submission status', 400)
    layanan_id = request.args.get('layanan_id')
    if layanan_id and not layanan_id.isdigit():
        return fail('layanan_id must be a number', 400)
    result = submission_service.list_submissions(
        page=request.args.get('page', 1),
        limit=request.args.get('limit', SUBMISSION_PAGE_LIMIT),
        status=status,
        layanan_id=layanan_id,
    )
    return paginated(result, serialize_submission)


@api_bp.route('/service-submissions/<int:submission_id>', methods=['GET'])
@admin_required
def submission_detail(submission_id):
    return _detail(submission_service, submission_id, serialize_submission)


@api_bp.route('/service-submissions/track/<nomor>', methods=['GET'])
def submission_track(nomor):
    submission = submission_service.get_by_number(nomor)
    if submission is None:
        return fail(submission_service.not_found_message, 404)
    return ok(serialize_submission_tracking(submission))


@api_bp.route('/service-submissions/<int:submission_id>/status', methods=['PUT'])
@admin_required
def submission_update_status(submission_id):
    payload = json_payload()
    submission, error = submission_service.update_status(
        submission_id,
        payload.get('status'),
        payload.get('catatan'),
    )
    if error:
        return fail(error, error_status(error))
    return ok(serialize_submission(submission), 'Status updated')


# ============= Documents =============

@api_bp.route('/documents', methods=['GET'])
def document_list():
    result = document_service.list_page(
        page=request.args.get('page', 1),
        limit=request.args.get('limit', DOCUMENT_PAGE_LIMIT),
        filters={'kategori': request.args.get('kategori')},
    )
    return paginated(result, serialize_document)


@api_bp.route('/documents/<int:document_id>', methods=['GET'])
def document_detail(document_id):
    return _detail(document_service, document_id, serialize_document)


@api_bp.route('/documents', methods=['POST'])
@admin_required
def document_create():
    return _create(document_service, json_payload(), serialize_document, 'Document created')


@api_bp.route('/documents/<int:document_id>', methods=['PUT'])
@admin_required
def document_update(document_id):
    return _update(document_service, document_id, json_payload(), serialize_document, 'Document updated')


@api_bp.route('/documents/<int:document_id>', methods=['DELETE'])
@admin_required
def document_delete(document_id):
    document = document_service.get_by_id(document_id)
    if document is None:
        return fail(document_service.not_found_message, 404)
    file_path = document.file_path
    deleted, error = document_service.delete(document_id)
    if not deleted:
        return fail(error, error_status(error))
    # Only files stored under the upload folder are removed
    delete_upload(file_path)
    return ok(True, 'Document deleted')


# ============= Statistics =============

@api_bp.route('/statistics', methods=['GET'])
@admin_required
def statistics():
    return ok(get_statistics())


@api_bp.route('/statistics/submissions', methods=['GET'])
@admin_required
def submission_statistics():
    return ok(get_submission_breakdown())


# ============= Uploads =============

@api_bp.route('/uploads', methods=['POST'])
@admin_required
def upload_file():
    folder = request.form.get('folder', 'general')
    try:
        stored = save_upload(request.files.get('file'), folder)
    except UploadError as exc:
        return fail(str(exc), 400, {'file': str(exc)})
    current_app.logger.info(f"Admin {current_user.email} uploaded {stored['path']}")
    return ok(stored, 'File uploaded', 201)
