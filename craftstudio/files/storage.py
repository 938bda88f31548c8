import uuid

from django.conf import settings
from django.core.files.storage import FileSystemStorage
from django.utils.text import get_valid_filename


def upload_storage():
    return FileSystemStorage(location=settings.UPLOAD_DIR, base_url=settings.MEDIA_URL)


def save_upload(uploaded_file):
    """Store an uploaded file under a unique name; returns its public URL"""
    storage = upload_storage()
    name = storage.save(f"{uuid.uuid4().hex}-{get_valid_filename(uploaded_file.name)}", uploaded_file)
    return storage.url(name)
