#!/usr/bin/env python3
"""
Basic LazyForest example: a tree view driven from the command line.

This example demonstrates:
- Building a store from plain dictionaries
- Lazy loading children from a slow async backend
- Reading snapshots as they are published
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from lazyforest import ROOT, create_store, render_outline
from lazyforest.aio import ContinueOnErrorsPolicy


INITIAL = [
    {
        'id': 'root-1', 'name': 'Documents', 'hasChildren': True,
        'children': [
            {'id': 'child-1-1', 'name': 'Project Plans', 'hasChildren': False},
            {'id': 'child-1-2', 'name': 'Design Assets', 'hasChildren': True},
        ],
    },
    {'id': 'root-2', 'name': 'Images', 'hasChildren': True},
    {'id': 'root-3', 'name': 'System', 'hasChildren': False},
]


async def fetch_children(node_id):
    """Pretend to be a remote API."""
    await asyncio.sleep(0.2)
    return [
        {'id': f'{node_id}-new-1', 'name': f'New Item 1 ({node_id})', 'hasChildren': False},
        {'id': f'{node_id}-new-2', 'name': f'New Item 2 ({node_id})', 'hasChildren': True},
    ]


async def main():
    """Walk through the five store operations."""
    if '-v' in sys.argv:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    store = create_store(
        INITIAL,
        fetch=fetch_children,
        policy=ContinueOnErrorsPolicy(),
        cache=True,
    )
    store.subscribe(lambda snapshot: print(
        f"  [snapshot] expanded={sorted(snapshot.expanded_ids)} loading={sorted(snapshot.loading_ids)}"
    ))

    print("Initial tree:")
    print(render_outline(store.snapshot))

    print("\nExpanding Images (lazy load):")
    await store.toggle_node('root-2')
    print(render_outline(store.snapshot))

    print("\nMoving 'Project Plans' before 'Images':")
    store.move_node('child-1-1', 'root-2')
    print(render_outline(store.snapshot))

    print("\nAdding, renaming and removing:")
    notes_id = store.add_node('root-1', 'Notes')
    store.rename_node(notes_id, 'Meeting Notes')
    store.add_node(ROOT, 'Music')
    store.remove_node('root-3')
    print(render_outline(store.snapshot))

    stats = await store.source.get_stats()
    print(f"\nSource stats: fetches={stats['fetch_count']}, cache hits={stats['cache_hits']}")


if __name__ == "__main__":
    asyncio.run(main())
