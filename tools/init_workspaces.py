"""Create the catalog workspaces in the configured database.

Usage: python tools/init_workspaces.py
"""
import sys, os
sys.path.append(os.getcwd())

from app import create_app
from catalog import SEED_WORKSPACES
from database import seed_workspaces, DatabaseService

app = create_app()
with app.app_context():
    print('Initializing workspaces...')
    created = seed_workspaces(SEED_WORKSPACES)
    for name in created:
        print(f'✓ Created workspace: {name}')
    if not created:
        print('All workspaces already exist.')
    for ws in DatabaseService.get_workspaces():
        print(f'  {ws.id}  {ws.name}')
