# catalog.py
"""Static workspace catalog.

Maps the short workspace keys used in URLs to the display names stored in the
``workspaces`` table, plus the per-style presentation presets.
"""

from enum import Enum


class WorkspaceKey(str, Enum):
    DEFAULT = 'default'
    ANALOG = 'analog'
    METAL = 'metal'
    VINTAGE = 'vintage'
    CHARACTER = 'character'
    ENVIRONMENT = 'environment'
    UI = 'ui'

    @property
    def display_name(self):
        return WORKSPACE_NAMES[self]

    @classmethod
    def parse(cls, key):
        """Return the enum member for ``key`` or None when the key is unknown."""
        try:
            return cls(key)
        except ValueError:
            return None


WORKSPACE_NAMES = {
    WorkspaceKey.DEFAULT: 'Default Workspace',
    WorkspaceKey.ANALOG: 'Analog Workspace',
    WorkspaceKey.METAL: 'Metal Workspace',
    WorkspaceKey.VINTAGE: 'Vintage Workspace',
    WorkspaceKey.CHARACTER: 'Character Design',
    WorkspaceKey.ENVIRONMENT: 'Environment Art',
    WorkspaceKey.UI: 'UI/UX Design',
}

# Rows inserted at startup. Only the three style workspaces have pages.
SEED_WORKSPACES = [
    WorkspaceKey.ANALOG,
    WorkspaceKey.METAL,
    WorkspaceKey.VINTAGE,
]

# Dashboard cards, in display order
STYLE_PRESETS = {
    'metal': {
        'name': '메탈',
        'description': '메탈릭하고 산업적인 느낌의 그래픽 스타일',
        'icon': '⚙️',
    },
    'vintage': {
        'name': '빈티지',
        'description': '클래식하고 복고적인 느낌의 그래픽 스타일',
        'icon': '📷',
    },
    'analog': {
        'name': '아날로그',
        'description': '따뜻하고 아날로그적인 느낌의 그래픽 스타일',
        'icon': '📻',
    },
}


def workspace_name_for_key(key):
    member = WorkspaceKey.parse(key)
    return member.display_name if member else None
