"""End-to-end smoke run against an in-process app using the test client.

Uses the configured database and whatever external keys are present in .env.
"""
import sys, os
sys.path.append(os.getcwd())
import json

from app import create_app

app = create_app()
with app.test_client() as client:
    r = client.post('/login', data={'username': 'generator_admin', 'password': 'moodAsset'})
    print('login', r.status_code, r.headers.get('Location'))

    r = client.get('/api/status')
    print('status', json.dumps(r.get_json(), indent=2))

    r = client.get('/api/workspaces/metal')
    if r.status_code != 200:
        print('metal workspace missing', r.status_code, r.get_data(as_text=True))
        sys.exit(1)
    workspace_id = r.get_json()['id']

    print('\nCalling generate-image...')
    r = client.post('/api/generate-image', json={
        'prompt': 'A lighthouse keeper and a cat at dusk',
        'style': 'metal',
        'workspaceId': workspace_id,
        'assetName': 'smoke test',
    })
    print('generate-image status', r.status_code)
    print(json.dumps(r.get_json(), indent=2, ensure_ascii=False)[:1500])

    r = client.get(f'/api/workspaces/{workspace_id}/assets')
    print('\nassets in workspace:', len(r.get_json()))
