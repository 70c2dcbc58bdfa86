#!/usr/bin/env python3
"""
Collection Initialization Script
Creates collections and indexes for the application and validates documents
against the bundled JSON schemas
"""

import argparse
import json
import logging
import os
from typing import Dict, List, Optional

from jsonschema import Draft7Validator
from jsonschema import ValidationError as SchemaError

from vidtube import config
from vidtube.db.store import EntityStore
from vidtube.errors import ValidationError

# Configure logging
logger = logging.getLogger(__name__)

# =============================================================================
# DATA STRUCTURE CONFIGURATION
# =============================================================================

SCHEMAS_DIR = os.path.join(os.path.dirname(__file__), 'schemas')

COLLECTION_TO_SCHEMA = {
    'users': 'user.json',
    'videos': 'video.json',
    'tweets': 'tweet.json',
    'comments': 'comment.json',
    'playlists': 'playlist.json',
    'likes': 'like.json',
    'subscriptions': 'subscription.json',
}


def load_json_schema(collection_name: str) -> Dict:
    """Load JSON schema for a collection from the package schemas directory"""
    schema_file = COLLECTION_TO_SCHEMA.get(collection_name)
    if not schema_file:
        logger.warning(f"No schema mapping found for collection: {collection_name}")
        return {}

    schema_path = os.path.join(SCHEMAS_DIR, schema_file)
    try:
        with open(schema_path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning(f"Schema file not found: {schema_path}")
        return {}
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in schema file {schema_path}: {e}")
        return {}


# Load all schemas
JSON_SCHEMAS = {name: load_json_schema(name) for name in COLLECTION_TO_SCHEMA}

# Collection Schema Definitions
COLLECTIONS_CONFIG = {
    "users": {
        "indexes": [
            {"fields": "id", "unique": True},
            {"fields": "username", "unique": True},
            {"fields": "email", "unique": True},
        ],
    },
    "videos": {
        "indexes": [
            {"fields": "id", "unique": True},
            {"fields": "owner", "unique": False},
            {"fields": "created_at", "unique": False},
            {"fields": "is_published", "unique": False},
        ],
    },
    "tweets": {
        "indexes": [
            {"fields": "id", "unique": True},
            {"fields": "owner", "unique": False},
            {"fields": "created_at", "unique": False},
        ],
    },
    "comments": {
        "indexes": [
            {"fields": "id", "unique": True},
            {"fields": "video", "unique": False},
            {"fields": "owner", "unique": False},
        ],
    },
    "playlists": {
        "indexes": [
            {"fields": "id", "unique": True},
            {"fields": "owner", "unique": False},
        ],
    },
    "likes": {
        "indexes": [
            {"fields": "id", "unique": True},
            # One like per (actor, target); the two unused target fields are always null
            {"fields": ["liked_by", "video", "comment", "tweet"], "unique": True},
            {"fields": "video", "unique": False},
            {"fields": "comment", "unique": False},
            {"fields": "tweet", "unique": False},
        ],
    },
    "subscriptions": {
        "indexes": [
            {"fields": "id", "unique": True},
            {"fields": ["subscriber", "channel"], "unique": True},
            {"fields": "channel", "unique": False},
        ],
    },
}

# Sample Data Templates
SAMPLE_DATA_TEMPLATES = {
    "users": [
        {
            "id": "64c0a6f4e5b1a2c3d4e5f601",
            "username": "dj_vegan",
            "email": "dj_vegan@test.com",
            "full_name": "DJ Vegan",
            "avatar": "https://example.com/avatars/dj_vegan.png",
            "cover_image": None,
            # Sample accounts cannot log in
            "password_hash": "!",
            "refresh_token": None,
            "watch_history": [],
            "created_at": "2024-01-15T10:30:00+00:00",
            "updated_at": "2024-01-15T10:30:00+00:00",
        },
        {
            "id": "64c0a6f4e5b1a2c3d4e5f602",
            "username": "dj_rodry",
            "email": "dj_rodry@test.com",
            "full_name": "DJ Rodry",
            "avatar": None,
            "cover_image": None,
            "password_hash": "!",
            "refresh_token": None,
            "watch_history": [],
            "created_at": "2024-02-01T09:15:00+00:00",
            "updated_at": "2024-02-01T09:15:00+00:00",
        },
    ],
    "videos": [
        {
            "id": "64c0a6f4e5b1a2c3d4e5f701",
            "owner": "64c0a6f4e5b1a2c3d4e5f601",
            "title": "Kick Heavy Session",
            "description": "Live set recorded in the studio",
            "video_file": "https://example.com/videos/kick_heavy.mp4",
            "thumbnail": "https://example.com/thumbnails/kick_heavy.png",
            "duration": 312.5,
            "views": 0,
            "is_published": True,
            "created_at": "2024-03-10T12:00:00+00:00",
            "updated_at": "2024-03-10T12:00:00+00:00",
        }
    ],
}

# =============================================================================
# VALIDATION FUNCTIONS
# =============================================================================

def check_document(collection_name: str, document: Dict) -> None:
    """
    Validate a document against its JSON schema

    Args:
        collection_name: Name of the collection
        document: Document to validate

    Raises:
        ValidationError: the document does not satisfy the schema
    """
    schema = JSON_SCHEMAS.get(collection_name)
    if not schema:
        logger.warning(f"No schema found for collection: {collection_name}")
        return

    try:
        Draft7Validator(schema).validate(document)
    except SchemaError as e:
        field = ".".join(str(p) for p in e.path) or "document"
        raise ValidationError(f"Invalid {field}: {e.message}")


def validate_document(collection_name: str, document: Dict) -> bool:
    """Like check_document, but logs and returns False instead of raising"""
    try:
        check_document(collection_name, document)
        return True
    except ValidationError as e:
        logger.error(f"Validation error for {collection_name}: {e.message}")
        return False


def validate_sample_data() -> bool:
    """Validate all sample data against their schemas"""
    logger.info("🔍 Validating sample data against JSON schemas...")

    for collection_name, sample_data in SAMPLE_DATA_TEMPLATES.items():
        for i, document in enumerate(sample_data):
            if not validate_document(collection_name, document):
                logger.error(f"Sample data validation failed for {collection_name}[{i}]")
                return False

        logger.info(f"✅ Sample data validation passed for {collection_name}")

    return True

# =============================================================================
# INITIALIZATION FUNCTIONS
# =============================================================================

def init_collections(store: EntityStore, drop_existing: bool = False, insert_samples: bool = False) -> bool:
    """
    Initialize collections and indexes

    Args:
        store: Entity store to initialize
        drop_existing: Whether to drop existing collections
        insert_samples: Whether to insert sample data
    """
    logger.info("🗄️  Initializing collections...")

    # Drop existing collections if requested
    if drop_existing:
        for collection_name in COLLECTIONS_CONFIG.keys():
            store.drop(collection_name)
            logger.info(f"🗑️  Dropped collection: {collection_name}")

    create_collections_and_indexes(store)

    # Validate sample data before insertion
    if insert_samples:
        if not validate_sample_data():
            logger.error("❌ Sample data validation failed. Aborting initialization.")
            return False
        insert_sample_data(store)

    verify_setup(store)
    return True


def create_collections_and_indexes(store: EntityStore):
    """Create collections and their indexes based on configuration"""

    for collection_name, collection_config in COLLECTIONS_CONFIG.items():
        logger.info(f"📁 Setting up collection: {collection_name}")

        for index_config in collection_config["indexes"]:
            fields = index_config["fields"]
            unique = index_config.get("unique", False)
            field_list = [fields] if isinstance(fields, str) else list(fields)

            # Unique indexes carry invariants; a failure here must stop startup
            store.create_index(collection_name, field_list, unique=unique)
            logger.info(f"  ✅ Index created: {field_list}{' (unique)' if unique else ''}")


def insert_sample_data(store: EntityStore):
    """Insert sample data based on templates"""

    for collection_name, sample_data in SAMPLE_DATA_TEMPLATES.items():
        # Only insert if collection is empty
        if store.count(collection_name) == 0:
            for document in sample_data:
                store.insert_one(collection_name, document)
            logger.info(f"✅ Sample data inserted into {collection_name}: {len(sample_data)} documents")
        else:
            logger.info(f"⏭️  Skipping sample data for {collection_name} (not empty)")


def verify_setup(store: EntityStore):
    """Log document counts and indexes for every configured collection"""
    logger.info("🔍 Verification Results:")

    for collection_name in COLLECTIONS_CONFIG.keys():
        count = store.count(collection_name)
        logger.info(f"  ✅ {collection_name}: {count} documents")

        indexes = store.list_indexes(collection_name)
        logger.info(f"     📋 Indexes ({len(indexes)}):")
        for idx in indexes:
            index_info = f"{idx['name']}: {list(idx['key'].keys())}"
            if idx.get('unique'):
                index_info += " (unique)"
            logger.info(f"       - {index_info}")


def get_collection_config(collection_name: Optional[str] = None):
    """Get collection configuration(s)"""
    if collection_name:
        return COLLECTIONS_CONFIG.get(collection_name)
    return COLLECTIONS_CONFIG

# =============================================================================
# MAIN EXECUTION
# =============================================================================

def main(argv: Optional[List[str]] = None):
    from vidtube.db.connection import get_store

    parser = argparse.ArgumentParser(description="Initialize vidtube collections")
    parser.add_argument("--drop", action="store_true", help="Drop existing collections")
    parser.add_argument("--samples", action="store_true", help="Insert sample data")
    parser.add_argument("--list-config", action="store_true", help="List current configuration")

    args = parser.parse_args(argv)

    if args.list_config:
        print("📋 Current Configuration:")
        for name, collection_config in COLLECTIONS_CONFIG.items():
            print(f"\n🗂️  Collection: {name}")
            print(f"   Schema: {list(JSON_SCHEMAS.get(name, {}).get('properties', {}).keys())}")
            print(f"   Indexes: {len(collection_config['indexes'])}")
            if name in SAMPLE_DATA_TEMPLATES:
                print(f"   Sample Data: {len(SAMPLE_DATA_TEMPLATES[name])} documents")
        return

    logging.basicConfig(level=config.LOG_LEVEL)
    init_collections(
        get_store(),
        drop_existing=args.drop,
        insert_samples=args.samples or config.SEED_SAMPLE_DATA,
    )


if __name__ == "__main__":
    main()
