from flask_sqlalchemy import SQLAlchemy
from datetime import datetime
import uuid

db = SQLAlchemy()

ASSET_STATUSES = ('pending', 'generating', 'done', 'error')


def _new_id():
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


class Workspace(db.Model):
    __tablename__ = 'workspaces'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    name = db.Column(db.String(150), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    assets = db.relationship('Asset', back_populates='workspace', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class Asset(db.Model):
    __tablename__ = 'assets'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    workspace_id = db.Column(db.String(36), db.ForeignKey('workspaces.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    prompt = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.Text, nullable=False)
    # "metadata" is reserved on declarative models, so the attribute is renamed
    meta = db.Column('metadata', db.JSON, nullable=False, default=dict)
    status = db.Column(db.String(20), nullable=False, default='done')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    workspace = db.relationship('Workspace', back_populates='assets')

    def to_dict(self, include_workspace=False):
        data = {
            'id': self.id,
            'workspace_id': self.workspace_id,
            'name': self.name,
            'prompt': self.prompt,
            'image_url': self.image_url,
            'metadata': dict(self.meta or {}),
            'status': self.status,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
        if include_workspace:
            data['workspaces'] = {'name': self.workspace.name if self.workspace else None}
        return data
