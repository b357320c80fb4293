"""
Storage Utility
===============

Local storage for uploaded screenshots.
Files live in UPLOAD_FOLDER and are served back at /uploads/<filename>.
"""

import os
import uuid

from werkzeug.utils import secure_filename

from .config import Config, get_config_value


class UploadTooLarge(ValueError):
    """A single uploaded file exceeds MAX_SCREENSHOT_SIZE."""


def get_upload_folder():
    return get_config_value('UPLOAD_FOLDER', Config.UPLOAD_FOLDER)


def allowed_file(filename):
    allowed = get_config_value('ALLOWED_EXTENSIONS', Config.ALLOWED_EXTENSIONS)
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed


def unique_filename(original_filename):
    """Random filename keeping the original (secured) extension"""
    safe_name = secure_filename(original_filename) or 'upload'
    ext = safe_name.rsplit('.', 1)[1].lower() if '.' in safe_name else ''
    return f"{uuid.uuid4().hex}.{ext}" if ext else uuid.uuid4().hex


def read_upload(file_storage, max_size=None):
    """Read an uploaded file into memory, enforcing the per-file size cap.

    Raises:
        UploadTooLarge: if the file is bigger than max_size bytes
    """
    if max_size is None:
        max_size = int(get_config_value('MAX_SCREENSHOT_SIZE', Config.MAX_SCREENSHOT_SIZE))

    # Read one byte past the cap so oversize files are detected without buffering them whole
    data = file_storage.read(max_size + 1)
    if len(data) > max_size:
        raise UploadTooLarge(file_storage.filename)
    return data


def save_upload(file_bytes, filename):
    """Save bytes under the upload folder. Returns the stored filename."""
    upload_dir = get_upload_folder()
    os.makedirs(upload_dir, exist_ok=True)
    filepath = os.path.join(upload_dir, filename)
    with open(filepath, 'wb') as f:
        f.write(file_bytes)
    return filename


def delete_uploads(filenames):
    """Remove stored files, ignoring ones already gone. Returns the number removed."""
    upload_dir = get_upload_folder()
    removed = 0
    for filename in filenames:
        # Stored names are generated by unique_filename, never paths
        if not filename or filename != os.path.basename(filename):
            continue
        try:
            os.remove(os.path.join(upload_dir, filename))
            removed += 1
        except FileNotFoundError:
            continue
    return removed
