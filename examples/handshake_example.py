#!/usr/bin/env python3
"""
MediaWiki OAuth Client - Handshake Example

This example walks through the three-legged OAuth handshake with a MediaWiki
wiki and fetches a verified identity for the authorizing user.  Set
MWOAUTH_ENDPOINT_URL, MWOAUTH_CONSUMER_KEY and MWOAUTH_CONSUMER_SECRET before
running it.
"""

import logging
import sys
import os

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mwoauth_client import (
    Handshaker,
    MWOAuthError,
    IdentityValidationError,
    load_settings_from_env,
)


def handshake_example():
    """Run the handshake interactively"""
    print("=== OAuth Handshake Example ===")

    settings = load_settings_from_env()
    print(f"   Endpoint: {settings.config.endpoint_url}")
    print(f"   Consumer: {settings.consumer.key}")

    with Handshaker.from_settings(settings) as handshaker:
        # 1. Ask the wiki for a request token
        print("\n1. Initiating handshake...")
        redirect, request_token = handshaker.initiate()
        print(f"   Request token: {request_token.key}")

        # 2. Send the user to the wiki to authorize the consumer
        print("\n2. Authorize the consumer in your browser:")
        print(f"   {redirect}")
        verify_code = input("   Verification code: ").strip()

        # 3. Exchange the request token for an access token
        print("\n3. Completing handshake...")
        access_token = handshaker.complete(request_token, verify_code)
        print(f"   Access token: {access_token.key}")

        # 4. Ask who authorized us
        print("\n4. Identifying user...")
        try:
            identity = handshaker.identify(access_token)
        except IdentityValidationError as e:
            print(f"   ✗ Identity rejected ({e.error_code}): {e}")
            return False

        print(f"   ✓ Identified as {identity.username}")
        print(f"   Groups: {', '.join(identity.groups)}")
        print(f"   Rights: {', '.join(identity.rights)}")

        # Access token can now sign API calls
        response = handshaker.make_oauth_call(
            access_token,
            settings.config.canonical_server_url + "/w/api.php?action=query&meta=userinfo&format=json"
        )
        print(f"   userinfo: {response.json()}")

    return True


def main():
    """Run the example"""
    logging.basicConfig(level=logging.INFO)
    try:
        success = handshake_example()
    except MWOAuthError as e:
        print(f"\n✗ Handshake failed [{e.error_code}]: {e}")
        success = False
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
