"""
File Storage Management for profile images
Handles upload, deletion, and URL generation for avatars and covers
"""

import os
import io
import uuid
import aiofiles
from fastapi import UploadFile, HTTPException
from PIL import Image
import logging

logger = logging.getLogger(__name__)

# Configuration
UPLOAD_DIR = os.getenv('UPLOAD_DIR', 'uploads')
UPLOAD_URL_PREFIX = os.getenv('UPLOAD_URL_PREFIX', '/uploads')
MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.gif'}
MAX_IMAGE_SIZE = {
    'avatar': (512, 512),
    'cover': (1600, 600),
}

class FileStorageManager:
    """Manages file uploads and deletions for profile images"""

    def __init__(self, upload_dir: str = None, url_prefix: str = None):
        self.upload_dir = upload_dir or UPLOAD_DIR
        self.url_prefix = (url_prefix or UPLOAD_URL_PREFIX).rstrip('/')

    @staticmethod
    def generate_filename(user_id: int, kind: str) -> str:
        """Generate unique filename for a user's image"""
        return f"{kind}_{user_id}_{uuid.uuid4().hex[:12]}.jpg"

    def get_file_path(self, filename: str) -> str:
        return os.path.join(self.upload_dir, filename)

    def get_public_url(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    @staticmethod
    async def read_validated(file: UploadFile) -> bytes:
        """Check size, extension and image format; returns the raw bytes"""
        file_ext = os.path.splitext(file.filename or '')[1].lower()
        if file_ext not in ALLOWED_EXTENSIONS:
            raise HTTPException(400, f"Invalid file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}")

        content = await file.read()
        if len(content) > MAX_FILE_SIZE:
            raise HTTPException(400, "File too large. Max size is 5MB")

        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
        except Exception:
            raise HTTPException(400, "Invalid image file")
        return content

    @staticmethod
    def resize_image(file_content: bytes, kind: str) -> bytes:
        """Resize image to the kind's max dimensions while maintaining aspect ratio"""
        try:
            with Image.open(io.BytesIO(file_content)) as img:
                if img.mode != 'RGB':
                    img = img.convert('RGB')
                img.thumbnail(MAX_IMAGE_SIZE[kind], Image.Resampling.LANCZOS)
                output = io.BytesIO()
                img.save(output, format='JPEG', quality=85, optimize=True)
                return output.getvalue()
        except Exception as e:
            raise HTTPException(400, f"Error processing image: {str(e)}")

    async def save_image(self, user_id: int, file: UploadFile, kind: str) -> str:
        """Save an uploaded avatar or cover and return its public URL"""
        if kind not in MAX_IMAGE_SIZE:
            raise ValueError(f'unknown image kind: {kind}')
        content = await self.read_validated(file)
        resized = self.resize_image(content, kind)

        os.makedirs(self.upload_dir, exist_ok=True)
        filename = self.generate_filename(user_id, kind)
        file_path = self.get_file_path(filename)
        try:
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(resized)
        except OSError as e:
            if os.path.exists(file_path):
                os.remove(file_path)
            raise HTTPException(500, f"Error saving file: {str(e)}")
        return self.get_public_url(filename)

    def delete_image(self, url: str) -> bool:
        """Delete a previously saved image; URLs we did not issue are left alone"""
        if not url or not url.startswith(self.url_prefix + '/'):
            return False
        file_path = self.get_file_path(url.rsplit('/', 1)[-1])
        try:
            os.remove(file_path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Could not delete {file_path}: {e}")
            return False

# Global instance
file_storage = FileStorageManager()

def get_file_storage() -> FileStorageManager:
    return file_storage
