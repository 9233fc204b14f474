#!/usr/bin/env python3
"""
Group guard bot configuration check.

Checks:
- the .env file and required fields
- bot token format and that Telegram accepts it
- numeric settings and the database location
"""

import os
import re
import sys
from pathlib import Path

import requests


REQUIRED_FIELDS = ['BOT_TOKEN']
POSITIVE_INT_FIELDS = ['DEFAULT_PASSWORD_TIMEOUT_MINUTES', 'MAX_REPLY_LENGTH', 'WEBHOOK_PORT']


def validate_env_file(path='.env'):
    """Check the .env file exists and holds the required fields"""
    if not os.path.exists(path):
        print(f"❌ {path} file not found!")
        print("Please create .env file with your configuration")
        return False

    env_vars = {}
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                env_vars[key.strip()] = value.strip().strip('"').strip("'")

    for field in REQUIRED_FIELDS:
        if field not in env_vars or not env_vars[field]:
            print(f"❌ Missing or empty {field} in {path}")
            return False

    return env_vars


def validate_telegram_token(token):
    """Check the format of the Telegram token and that getMe works"""
    if not re.match(r'^\d+:[a-zA-Z0-9_-]+$', token):
        print("❌ Invalid Telegram bot token format")
        print("   Should be like: 123456789:ABCdefGHI...")
        return False

    try:
        response = requests.get(f'https://api.telegram.org/bot{token}/getMe', timeout=10)
        if response.status_code == 200:
            data = response.json()
            if data.get('ok'):
                bot_info = data.get('result', {})
                print(f"✅ Bot connected successfully: @{bot_info.get('username', 'unknown')}")
                return True
            print("❌ Invalid bot token (API returned error)")
            return False
        elif response.status_code == 401:
            print("❌ Invalid bot token (401 Unauthorized)")
            return False
        else:
            print(f"❌ Telegram API error: {response.status_code}")
            return False
    except requests.exceptions.RequestException as e:
        print(f"❌ Network error connecting to Telegram: {e}")
        return False


def validate_positive_ints(env_vars):
    ok = True
    for field in POSITIVE_INT_FIELDS:
        raw = env_vars.get(field)
        if raw is None:
            continue
        if not raw.isdigit() or int(raw) <= 0:
            print(f"❌ {field} must be a positive integer, got '{raw}'")
            ok = False
    return ok


def validate_database_location(database_url):
    """Check that the SQLite file can be created where DATABASE_URL points"""
    path = database_url.split(':///', 1)[-1]
    directory = Path(path).resolve().parent
    if not directory.exists():
        print(f"❌ Database directory does not exist: {directory}")
        return False
    if not os.access(directory, os.W_OK):
        print(f"❌ Database directory is not writable: {directory}")
        return False
    print(f"✅ Database location is writable: {path}")
    return True


def main():
    print("🔍 Group Guard Bot - Configuration Validation")
    print("=" * 50)

    env_vars = validate_env_file()
    if not env_vars:
        sys.exit(1)

    validation_failed = False

    print("\n🔍 Validating configuration...")

    if not validate_telegram_token(env_vars['BOT_TOKEN']):
        validation_failed = True

    if not validate_positive_ints(env_vars):
        validation_failed = True

    if not validate_database_location(env_vars.get('DATABASE_URL', 'sqlite:///groupguard.db')):
        validation_failed = True

    if env_vars.get('USE_WEBHOOK', '').lower() in ('1', 'true', 'yes') and not env_vars.get('WEBHOOK_URL'):
        print("❌ USE_WEBHOOK is enabled but WEBHOOK_URL is empty")
        validation_failed = True

    if validation_failed:
        print("\n❌ Configuration validation failed!")
        print("Please fix the issues above before running the bot.")
        sys.exit(1)
    else:
        print("\n✅ All configuration checks passed!")
        print("Bot is ready to start.")


if __name__ == "__main__":
    main()
