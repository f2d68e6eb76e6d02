"""Theory Atlas package.

This package hosts configuration, content loaders, the layered diagram
layout, diary utilities, and static page rendering for the theory models site.
"""

__all__ = [
    'config',
]
