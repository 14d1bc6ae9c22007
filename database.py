# database.py
"""Workspace and asset access.

Thin pass-through over the SQLAlchemy models. Failures are logged with their
cause and re-raised as ``DatabaseError`` carrying a user-facing message.
"""

from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from catalog import workspace_name_for_key
from models import db, Workspace, Asset

# User-facing failure messages
MSG_WORKSPACES_LOAD_FAILED = '워크스페이스를 불러오는데 실패했습니다.'
MSG_ASSETS_LOAD_FAILED = '에셋을 불러오는데 실패했습니다.'
MSG_ASSET_CREATE_FAILED = '에셋 생성에 실패했습니다.'
MSG_ASSET_UPDATE_FAILED = '에셋 수정에 실패했습니다.'
MSG_ASSET_DELETE_FAILED = '에셋 삭제에 실패했습니다.'


class DatabaseError(Exception):
    """A database operation failed; ``message`` is safe to show to users."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class DatabaseService:
    # --- WORKSPACES ---

    @staticmethod
    def get_workspaces():
        try:
            return Workspace.query.order_by(Workspace.created_at.asc()).all()
        except SQLAlchemyError as e:
            current_app.logger.error(f"[DB] Error fetching workspaces: {e}")
            raise DatabaseError(MSG_WORKSPACES_LOAD_FAILED, e) from e

    @staticmethod
    def get_workspace_by_name(name):
        try:
            return Workspace.query.filter_by(name=name).one_or_none()
        except SQLAlchemyError as e:
            current_app.logger.error(f"[DB] Error fetching workspace {name!r}: {e}")
            return None

    @staticmethod
    def get_workspace_by_key(key):
        workspace_name = workspace_name_for_key(key)
        if not workspace_name:
            raise ValueError(f"Invalid workspace key: {key}")
        return DatabaseService.get_workspace_by_name(workspace_name)

    # --- ASSETS ---

    @staticmethod
    def get_assets(workspace_id):
        try:
            return (Asset.query
                    .filter_by(workspace_id=workspace_id)
                    .order_by(Asset.created_at.desc())
                    .all())
        except SQLAlchemyError as e:
            current_app.logger.error(f"[DB] Error fetching assets: {e}")
            raise DatabaseError(MSG_ASSETS_LOAD_FAILED, e) from e

    @staticmethod
    def get_asset_by_id(asset_id):
        try:
            return db.session.get(Asset, asset_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"[DB] Error fetching asset {asset_id}: {e}")
            return None

    @staticmethod
    def create_asset(workspace_id, name, prompt, image_url, metadata=None):
        try:
            if db.session.get(Workspace, workspace_id) is None:
                current_app.logger.error(f"[DB] Error creating asset: unknown workspace {workspace_id}")
                raise DatabaseError(MSG_ASSET_CREATE_FAILED)

            asset = Asset(
                workspace_id=workspace_id,
                name=name,
                prompt=prompt,
                image_url=image_url,
                meta=dict(metadata or {}),
            )
            db.session.add(asset)
            db.session.commit()
            return asset
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"[DB] Error creating asset: {e}")
            raise DatabaseError(MSG_ASSET_CREATE_FAILED, e) from e

    @staticmethod
    def update_asset(asset_id, name=None, prompt=None, image_url=None, metadata=None):
        """Update name/prompt/image of an asset.

        ``metadata`` is merged into the stored bag and ``updated_at`` is always
        stamped, even when no other field changes.
        """
        try:
            asset = db.session.get(Asset, asset_id)
            if asset is None:
                current_app.logger.error(f"[DB] Error updating asset: {asset_id} not found")
                raise DatabaseError(MSG_ASSET_UPDATE_FAILED)

            if name is not None:
                asset.name = name
            if prompt is not None:
                asset.prompt = prompt
            if image_url is not None:
                asset.image_url = image_url

            merged = dict(asset.meta or {})
            merged.update(metadata or {})
            merged['updated_at'] = datetime.utcnow().isoformat()
            # reassign so the JSON column is flagged dirty
            asset.meta = merged

            db.session.commit()
            return asset
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"[DB] Error updating asset: {e}")
            raise DatabaseError(MSG_ASSET_UPDATE_FAILED, e) from e

    @staticmethod
    def delete_asset(asset_id):
        try:
            Asset.query.filter_by(id=asset_id).delete()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"[DB] Error deleting asset: {e}")
            raise DatabaseError(MSG_ASSET_DELETE_FAILED, e) from e

    # --- STATS ---

    @staticmethod
    def get_asset_count(workspace_id):
        try:
            return Asset.query.filter_by(workspace_id=workspace_id).count()
        except SQLAlchemyError as e:
            current_app.logger.error(f"[DB] Error counting assets: {e}")
            return 0

    @staticmethod
    def get_recent_assets(limit=10):
        try:
            return (Asset.query
                    .order_by(Asset.created_at.desc())
                    .limit(limit)
                    .all())
        except SQLAlchemyError as e:
            current_app.logger.error(f"[DB] Error fetching recent assets: {e}")
            return []


def seed_workspaces(keys):
    """Insert catalog workspaces that are not in the table yet."""
    created = []
    for key in keys:
        name = key.display_name
        if Workspace.query.filter_by(name=name).first() is None:
            db.session.add(Workspace(name=name))
            created.append(name)
    if created:
        db.session.commit()
        current_app.logger.info(f"[DB] Seeded workspaces: {', '.join(created)}")
    return created
