"""
Document and evidence photo uploads to Cloudinary.

When Cloudinary is not configured, or an upload fails, a placeholder URL is
stored instead so that the workflow is never blocked by the file store.
"""

import logging
from urllib.parse import quote_plus

import cloudinary
import cloudinary.uploader
from django.conf import settings

logger = logging.getLogger(__name__)

PLACEHOLDER_URL = 'https://via.placeholder.com/300x200?text={label}+Uploaded'


def placeholder_url(label):
    return PLACEHOLDER_URL.format(label=quote_plus(label.replace('_', ' ').title()))


def is_configured():
    options = getattr(settings, 'CLOUDINARY_STORAGE', {})
    return all(options.get(key) for key in ('CLOUD_NAME', 'API_KEY', 'API_SECRET'))


def _configure():
    options = settings.CLOUDINARY_STORAGE
    cloudinary.config(
        cloud_name=options['CLOUD_NAME'],
        api_key=options['API_KEY'],
        api_secret=options['API_SECRET'],
        secure=True,
    )


def upload_file(file_obj, folder, label):
    """
    Upload one file and return its URL, or a placeholder URL for ``label``.
    """
    if file_obj is None:
        return None
    if not is_configured():
        logger.warning(f"Cloudinary not configured; using placeholder URL for {label}")
        return placeholder_url(label)

    _configure()
    try:
        result = cloudinary.uploader.upload(file_obj, folder=folder, resource_type='auto')
    except Exception:
        logger.exception(f"Cloudinary upload failed for {label}; using placeholder URL")
        return placeholder_url(label)
    return result.get('secure_url') or result.get('url')


def upload_many(files, folder, label):
    return [url for url in (upload_file(f, folder, label) for f in files) if url]
