# storage.py
"""Upload bucket for asset images.

The bucket is a directory under the app's static folder; public URLs are the
matching ``/static/<bucket>/...`` paths.
"""

import os
import re
import secrets
import time

import requests
from flask import current_app

CONTENT_TYPE_EXTENSIONS = {
    'image/jpeg': '.jpg',
    'image/jpg': '.jpg',
    'image/png': '.png',
    'image/gif': '.gif',
    'image/webp': '.webp',
    'image/svg+xml': '.svg',
}


class StorageError(Exception):
    pass


class StorageService:

    @staticmethod
    def bucket_dir():
        bucket = current_app.config.get('STORAGE_BUCKET', 'asset-images')
        path = os.path.join(current_app.static_folder, bucket)
        os.makedirs(path, exist_ok=True)
        return path

    @staticmethod
    def public_url(file_name):
        bucket = current_app.config.get('STORAGE_BUCKET', 'asset-images')
        return f"/static/{bucket}/{file_name}"

    @staticmethod
    def _resolve(file_name):
        root = os.path.realpath(StorageService.bucket_dir())
        path = os.path.realpath(os.path.join(root, file_name))
        if os.path.commonpath([root, path]) != root:
            raise StorageError(f"Invalid file name: {file_name}")
        return path

    @staticmethod
    def extension_from_content_type(content_type):
        ct = (content_type or '').split(';')[0].strip().lower()
        return CONTENT_TYPE_EXTENSIONS.get(ct, '.jpg')

    @staticmethod
    def generate_unique_file_name(asset_name, workspace_id):
        sanitized = re.sub(r'[^a-zA-Z0-9]', '_', asset_name or '')
        timestamp = int(time.time() * 1000)
        return f"{workspace_id}/{sanitized}_{timestamp}_{secrets.token_hex(3)}"

    @staticmethod
    def upload_image_file(data, file_name):
        """Write raw image bytes into the bucket (overwriting) and return the public URL."""
        path = StorageService._resolve(file_name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb') as f:
            f.write(data)
        return StorageService.public_url(file_name)

    @staticmethod
    def upload_image_from_url(image_url, file_name):
        current_app.logger.info(f"[STORAGE] Downloading image from {image_url}")
        try:
            resp = requests.get(image_url, timeout=current_app.config.get('EXTERNAL_REQUEST_TIMEOUT', 30))
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise StorageError(f"Failed to download image: {e}") from e

        content_type = resp.headers.get('Content-Type') or 'image/jpeg'
        extension = StorageService.extension_from_content_type(content_type)
        final_name = file_name if file_name.endswith(extension) else f"{file_name}{extension}"

        url = StorageService.upload_image_file(resp.content, final_name)
        current_app.logger.info(f"[STORAGE] Stored {len(resp.content)} bytes ({content_type}) at {url}")
        return url

    @staticmethod
    def delete_image(file_name):
        path = StorageService._resolve(file_name)
        if not os.path.exists(path):
            raise StorageError(f"Failed to delete image: {file_name} not found")
        os.remove(path)
