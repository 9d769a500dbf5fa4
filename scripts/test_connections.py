#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the database, the AI cache store and the AI provider.
Usage: python scripts/test_connections.py
"""
from sqlalchemy.engine import make_url

from resume_studio.core.config import get_settings
from resume_studio.db.database import test_database_connection
from resume_studio.db.mongodb import mongo_enabled, test_mongo_connection
from resume_studio.services.ai_client import get_ai_client


def main():
    settings = get_settings()
    print("=" * 50)
    print("RESUME STUDIO - CONNECTION TEST")
    print("=" * 50)

    print("\n[1] Testing SQL database...")
    print(f"    URL: {make_url(settings.sqlalchemy_url).render_as_string(hide_password=True)}")
    if test_database_connection():
        print("    ✅ Database: CONNECTED")
    else:
        print("    ❌ Database: FAILED")

    print("\n[2] Testing MongoDB AI cache...")
    if mongo_enabled():
        print(f"    Database: {settings.mongodb_db}")
        if test_mongo_connection():
            print("    ✅ MongoDB: CONNECTED")
        else:
            print("    ❌ MongoDB: FAILED (AI cache will use memory)")
    else:
        print("    ⚠️  MONGODB_URI not set, AI cache uses process memory")

    print(f"\n[3] Testing AI provider ({settings.ai_provider})...")
    client = get_ai_client()
    if client.enabled:
        print(f"    Model: {client.model}")
        if client.test_connection():
            print("    ✅ AI provider: CONNECTED")
        else:
            print("    ❌ AI provider: FAILED")
    else:
        print("    ⚠️  AI_API_KEY not configured, rule-based fallbacks only")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
