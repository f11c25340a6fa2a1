import os
import secrets
from flask import current_app
from werkzeug.utils import secure_filename
from app.exceptions import ValidationError

IMAGE_SUBDIRECTORY = "event-images"
ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
MAX_IMAGE_SIZE = 2 * 1024 * 1024


def _extension(filename):
    filename = secure_filename(filename or "")
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def save_event_image(file_storage):
    """Store an uploaded image under a random name and return its relative path."""
    extension = _extension(file_storage.filename)
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(
            {"image": [f"The image must be a file of type: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}."]}
        )

    stream = file_storage.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    if size > MAX_IMAGE_SIZE:
        raise ValidationError({"image": ["The image may not be greater than 2048 kilobytes."]})

    directory = os.path.join(current_app.config["UPLOAD_FOLDER"], IMAGE_SUBDIRECTORY)
    os.makedirs(directory, exist_ok=True)
    filename = f"{secrets.token_hex(20)}.{extension}"
    file_storage.save(os.path.join(directory, filename))
    current_app.logger.info(f"Stored event image {filename} ({size} bytes)")
    return f"{IMAGE_SUBDIRECTORY}/{filename}"


def delete_event_image(image_path):
    if not image_path:
        return
    full_path = os.path.join(current_app.config["UPLOAD_FOLDER"], image_path)
    try:
        os.remove(full_path)
    except FileNotFoundError:
        current_app.logger.warning(f"Event image {image_path} was already removed")
