from unittest.mock import Mock

import api
import storage
from database import DatabaseService, MSG_ASSET_CREATE_FAILED
from image_generator import enhance_prompt_with_style, placeholder_url


def _create(client, workspace_id, **overrides):
    body = {'workspace_id': workspace_id, 'name': 'Test', 'prompt': 'a cat', 'image_url': 'http://x/y.png'}
    body.update(overrides)
    return client.post('/api/assets', json=body)


# --- assets ---

def test_create_asset_example(client, metal_workspace):
    resp = _create(client, metal_workspace.id)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['name'] == 'Test'
    assert body['prompt'] == 'a cat'
    assert body['image_url'] == 'http://x/y.png'
    assert body['workspace_id'] == metal_workspace.id
    assert body['id']
    assert body['created_at'] and body['updated_at']

    listed = client.get(f'/api/workspaces/{metal_workspace.id}/assets').get_json()
    assert [a['id'] for a in listed] == [body['id']]


def test_create_asset_missing_fields(client, metal_workspace):
    resp = client.post('/api/assets', json={'workspace_id': metal_workspace.id, 'name': 'x'})
    assert resp.status_code == 400
    assert resp.get_json() == {'error': 'Missing required fields'}


def test_create_asset_unknown_workspace(client):
    resp = _create(client, 'missing')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Failed to create asset', 'details': MSG_ASSET_CREATE_FAILED}


def test_recent_assets(client, metal_workspace):
    for i in range(3):
        _create(client, metal_workspace.id, name=f'asset {i}')

    body = client.get('/api/assets?limit=2').get_json()
    assert len(body) == 2
    assert body[0]['workspaces'] == {'name': 'Metal Workspace'}


def test_get_and_update_asset(client, metal_workspace):
    asset_id = _create(client, metal_workspace.id).get_json()['id']

    assert client.get(f'/api/assets/{asset_id}').get_json()['name'] == 'Test'

    resp = client.put(f'/api/assets/{asset_id}', json={'name': 'Renamed', 'image_url': 'http://x/z.png'})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['name'] == 'Renamed'
    assert body['prompt'] == 'a cat'
    assert body['image_url'] == 'http://x/z.png'
    assert 'updated_at' in body['metadata']


def test_update_asset_blank_name(client, metal_workspace):
    asset_id = _create(client, metal_workspace.id).get_json()['id']
    assert client.put(f'/api/assets/{asset_id}', json={'name': '  '}).status_code == 400


def test_missing_asset_is_404(client):
    assert client.get('/api/assets/nope').status_code == 404
    assert client.put('/api/assets/nope', json={'name': 'x'}).status_code == 404


# --- workspaces ---

def test_list_workspaces(client):
    body = client.get('/api/workspaces').get_json()
    assert {w['name'] for w in body} == {'Analog Workspace', 'Metal Workspace', 'Vintage Workspace'}


def test_workspace_by_key(client, metal_workspace):
    _create(client, metal_workspace.id)
    body = client.get('/api/workspaces/metal').get_json()
    assert body['id'] == metal_workspace.id
    assert body['asset_count'] == 1


def test_workspace_by_key_not_found(client):
    assert client.get('/api/workspaces/plastic').status_code == 404
    # valid key without a seeded row
    assert client.get('/api/workspaces/ui').status_code == 404


# --- generation ---

def test_generate_image_creates_asset(client, metal_workspace):
    resp = client.post('/api/generate-image', json={
        'prompt': 'a cat', 'style': 'metal', 'workspaceId': metal_workspace.id, 'assetName': 'Cat'})
    assert resp.status_code == 200
    body = resp.get_json()

    enhanced = enhance_prompt_with_style('a cat', 'metal')
    assert body['success'] is True
    assert body['asset']['name'] == 'Cat'
    assert body['asset']['prompt'] == enhanced
    assert body['asset']['image_url'] == placeholder_url(enhanced, 'metal')
    assert body['asset']['metadata']['originalPrompt'] == 'a cat'
    assert body['asset']['metadata']['source'] == 'placeholder'
    assert 'generatedAt' in body['asset']['metadata']
    assert body['imageGeneration']['imageUrl'] == body['asset']['image_url']
    assert body['imageGeneration']['enhancedPrompt'] == enhanced

    assert DatabaseService.get_asset_count(metal_workspace.id) == 1


def test_generate_image_is_deterministic_without_keys(client, metal_workspace):
    payload = {'prompt': 'a cat', 'style': 'vintage', 'workspaceId': metal_workspace.id, 'assetName': 'Cat'}
    first = client.post('/api/generate-image', json=payload).get_json()
    second = client.post('/api/generate-image', json=payload).get_json()
    assert first['asset']['image_url'] == second['asset']['image_url']
    assert first['asset']['id'] != second['asset']['id']


def test_generate_image_defaults_style(client, metal_workspace):
    body = client.post('/api/generate-image', json={
        'prompt': 'a cat', 'workspaceId': metal_workspace.id, 'assetName': 'Cat'}).get_json()
    assert body['imageGeneration']['metadata']['style'] == 'realistic'


def test_generate_image_missing_asset_name(client, metal_workspace):
    resp = client.post('/api/generate-image', json={
        'prompt': 'a cat', 'style': 'metal', 'workspaceId': metal_workspace.id})
    assert resp.status_code == 400
    assert resp.get_json()['error'].startswith('Missing required fields')


def test_generate_image_unknown_workspace(client):
    resp = client.post('/api/generate-image', json={
        'prompt': 'a cat', 'style': 'metal', 'workspaceId': 'missing', 'assetName': 'Cat'})
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error'] == 'Failed to generate image'
    assert body['details'] == MSG_ASSET_CREATE_FAILED


def test_generate_image_persists_to_bucket(app, client, metal_workspace, tmp_path, monkeypatch):
    app.config['PERSIST_GENERATED_IMAGES'] = True
    app.static_folder = str(tmp_path)
    resp = Mock(content=b'jpegdata', headers={'Content-Type': 'image/jpeg'})
    resp.raise_for_status.return_value = None
    monkeypatch.setattr(storage.requests, 'get', Mock(return_value=resp))

    body = client.post('/api/generate-image', json={
        'prompt': 'a cat', 'style': 'analog', 'workspaceId': metal_workspace.id, 'assetName': 'Cat'}).get_json()

    assert body['asset']['image_url'].startswith(f'/static/asset-images/{metal_workspace.id}/Cat_')
    assert body['asset']['image_url'].endswith('.jpg')
    assert body['asset']['metadata']['sourceUrl'].startswith('https://picsum.photos/id/')


def test_preview_image_does_not_persist(client, metal_workspace):
    resp = client.post('/api/preview-image', json={'prompt': 'a cat', 'style': 'metal'})
    assert resp.status_code == 200
    assert resp.get_json()['imageUrl'].startswith('https://picsum.photos/id/')
    assert DatabaseService.get_recent_assets() == []


def test_preview_image_requires_prompt(client):
    assert client.post('/api/preview-image', json={}).status_code == 400


def test_status_hides_secrets(app, client):
    app.config['OPENROUTER_API_KEY'] = 'secret-value'
    body = client.get('/api/status').get_json()
    assert body['has_openrouter_key'] is True
    assert 'secret-value' not in str(body)
    assert body['strategies'] == [s.name for s in api.image_generator.strategies]


def test_unknown_api_route_is_json(client):
    resp = client.get('/api/nothing-here')
    assert resp.status_code == 404
    assert resp.get_json() == {'error': 'Not found'}


def test_update_asset_rejects_non_text_fields(client, metal_workspace):
    asset_id = _create(client, metal_workspace.id).get_json()['id']

    resp = client.put(f'/api/assets/{asset_id}', json={'name': 5})
    assert resp.status_code == 400
    assert 'name' in resp.get_json()['error']

    resp = client.put(f'/api/assets/{asset_id}', json={'prompt': ''})
    assert resp.status_code == 400
    assert 'prompt' in resp.get_json()['error']

    assert client.get(f'/api/assets/{asset_id}').get_json()['prompt'] == 'a cat'


def test_metadata_must_be_an_object(client, metal_workspace):
    resp = _create(client, metal_workspace.id, metadata='oops')
    assert resp.status_code == 400
    assert DatabaseService.get_recent_assets() == []

    asset_id = _create(client, metal_workspace.id).get_json()['id']
    resp = client.put(f'/api/assets/{asset_id}', json={'metadata': ['oops']})
    assert resp.status_code == 400


def test_create_asset_rejects_non_text_name(client, metal_workspace):
    assert _create(client, metal_workspace.id, name=5).status_code == 400


def test_preview_image_with_lone_surrogate(client):
    resp = client.post('/api/preview-image', json={'prompt': 'cat \ud800', 'style': 'metal'})
    assert resp.status_code == 200
    assert resp.get_json()['imageUrl'].startswith('https://picsum.photos/id/')


def test_api_server_error_is_json(app):
    app.config['PROPAGATE_EXCEPTIONS'] = False

    @app.route('/api/boom')
    def boom():
        raise RuntimeError('boom')

    resp = app.test_client().get('/api/boom')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Internal Server Error'}
