# api.py
"""JSON endpoints for workspaces, assets and image generation."""

from flask import Blueprint, request, jsonify, current_app

from catalog import WorkspaceKey
from database import DatabaseService, DatabaseError
from image_generator import image_generator, DEFAULT_STYLE
from storage import StorageService, StorageError

api_bp = Blueprint('api', __name__, url_prefix='/api')

ASSET_FIELDS = ('workspace_id', 'name', 'prompt', 'image_url')
GENERATE_FIELDS = ('prompt', 'workspaceId', 'assetName')


def _error(message, status, details=None):
    body = {'error': message}
    if details:
        body['details'] = details
    return jsonify(body), status


def _missing(data, fields):
    return [f for f in fields if not data.get(f)]


def _blank(data, fields):
    """Fields present in ``data`` whose value is not a non-blank string."""
    return [f for f in fields if f in data and not (isinstance(data[f], str) and data[f].strip())]


def _bad_metadata(data):
    return data.get('metadata') is not None and not isinstance(data['metadata'], dict)


# --- ASSETS ---

@api_bp.route('/assets', methods=['GET'])
def list_assets():
    limit = request.args.get('limit', type=int) or current_app.config['RECENT_ASSETS_LIMIT']
    assets = DatabaseService.get_recent_assets(limit=limit)
    return jsonify([a.to_dict(include_workspace=True) for a in assets]), 200


@api_bp.route('/assets', methods=['POST'])
def create_asset():
    data = request.get_json(silent=True) or {}
    if _missing(data, ASSET_FIELDS):
        return _error('Missing required fields', 400)
    blank = _blank(data, ('name', 'prompt', 'image_url'))
    if blank:
        return _error(f"Invalid fields: {', '.join(blank)}", 400)
    if _bad_metadata(data):
        return _error('Invalid fields: metadata must be an object', 400)
    try:
        asset = DatabaseService.create_asset(
            workspace_id=data['workspace_id'],
            name=data['name'],
            prompt=data['prompt'],
            image_url=data['image_url'],
            metadata=data.get('metadata'),
        )
    except DatabaseError as e:
        return _error('Failed to create asset', 500, e.message)
    return jsonify(asset.to_dict()), 200


@api_bp.route('/assets/<asset_id>', methods=['GET'])
def get_asset(asset_id):
    asset = DatabaseService.get_asset_by_id(asset_id)
    if asset is None:
        return _error('Asset not found', 404)
    return jsonify(asset.to_dict()), 200


@api_bp.route('/assets/<asset_id>', methods=['PUT'])
def update_asset(asset_id):
    data = request.get_json(silent=True) or {}
    blank = _blank(data, ('name', 'prompt'))
    if blank:
        return _error(f"Missing required fields: {', '.join(blank)}", 400)
    if _bad_metadata(data):
        return _error('Invalid fields: metadata must be an object', 400)
    if DatabaseService.get_asset_by_id(asset_id) is None:
        return _error('Asset not found', 404)
    try:
        asset = DatabaseService.update_asset(
            asset_id,
            name=data.get('name'),
            prompt=data.get('prompt'),
            image_url=data.get('image_url') or None,
            metadata=data.get('metadata'),
        )
    except DatabaseError as e:
        return _error('Failed to update asset', 500, e.message)
    return jsonify(asset.to_dict()), 200


# --- WORKSPACES ---

@api_bp.route('/workspaces', methods=['GET'])
def list_workspaces():
    try:
        workspaces = DatabaseService.get_workspaces()
    except DatabaseError as e:
        return _error('Failed to fetch workspaces', 500, e.message)
    return jsonify([w.to_dict() for w in workspaces]), 200


@api_bp.route('/workspaces/<key>', methods=['GET'])
def get_workspace(key):
    if WorkspaceKey.parse(key) is None:
        return _error(f'Invalid workspace key: {key}', 404)
    workspace = DatabaseService.get_workspace_by_key(key)
    if workspace is None:
        return _error('Workspace not found', 404)
    body = workspace.to_dict()
    body['asset_count'] = DatabaseService.get_asset_count(workspace.id)
    return jsonify(body), 200


@api_bp.route('/workspaces/<workspace_id>/assets', methods=['GET'])
def list_workspace_assets(workspace_id):
    try:
        assets = DatabaseService.get_assets(workspace_id)
    except DatabaseError as e:
        return _error('Failed to fetch assets', 500, e.message)
    return jsonify([a.to_dict() for a in assets]), 200


# --- IMAGE GENERATION ---

def _persist_to_bucket(image_url, asset_name, workspace_id):
    """Copy the chosen image into the bucket; keep the remote URL on failure."""
    if not current_app.config.get('PERSIST_GENERATED_IMAGES'):
        return image_url
    try:
        file_name = StorageService.generate_unique_file_name(asset_name, workspace_id)
        return StorageService.upload_image_from_url(image_url, file_name)
    except StorageError as e:
        current_app.logger.warning(f"[STORAGE] Keeping remote URL, upload failed: {e}")
        return image_url


@api_bp.route('/generate-image', methods=['POST'])
def generate_image():
    data = request.get_json(silent=True) or {}
    if _missing(data, GENERATE_FIELDS):
        return _error('Missing required fields: prompt, workspaceId, assetName', 400)

    prompt = data['prompt']
    style = data.get('style') or DEFAULT_STYLE
    workspace_id = data['workspaceId']
    asset_name = data['assetName']
    current_app.logger.info(f"[IMAGE] Generate request workspace={workspace_id} asset={asset_name!r} style={style}")

    result = image_generator.generate_image(prompt, style)
    image_url = _persist_to_bucket(result.image_url, asset_name, workspace_id)

    metadata = dict(result.metadata)
    metadata['generatedAt'] = result.metadata['timestamp']
    if image_url != result.image_url:
        metadata['sourceUrl'] = result.image_url

    try:
        asset = DatabaseService.create_asset(
            workspace_id=workspace_id,
            name=asset_name,
            prompt=result.prompt,
            image_url=image_url,
            metadata=metadata,
        )
    except DatabaseError as e:
        return _error('Failed to generate image', 500, e.message)

    return jsonify({
        'success': True,
        'asset': asset.to_dict(),
        'imageGeneration': {
            'imageUrl': image_url,
            'enhancedPrompt': result.prompt,
            'metadata': result.metadata,
        },
    }), 200


@api_bp.route('/preview-image', methods=['POST'])
def preview_image():
    """Run the chain without persisting anything (used by the edit modal)."""
    data = request.get_json(silent=True) or {}
    if not data.get('prompt'):
        return _error('Missing required fields: prompt', 400)
    result = image_generator.generate_image(data['prompt'], data.get('style') or DEFAULT_STYLE)
    return jsonify({
        'imageUrl': result.image_url,
        'enhancedPrompt': result.prompt,
        'metadata': result.metadata,
    }), 200


@api_bp.route('/status', methods=['GET'])
def status():
    """Return active provider configuration (safe, non-secret) for UI debugging."""
    cfg = current_app.config
    return jsonify({
        'has_openrouter_key': bool(cfg.get('OPENROUTER_API_KEY')),
        'has_unsplash_key': bool(cfg.get('UNSPLASH_ACCESS_KEY')),
        'image_model': cfg.get('IMAGE_MODEL'),
        'prompt_model': cfg.get('PROMPT_MODEL'),
        'persist_generated_images': bool(cfg.get('PERSIST_GENERATED_IMAGES')),
        'strategies': [s.name for s in image_generator.strategies],
    }), 200
