"""External user storage federation package.

To use the Flask app:
    from user_storage.flask_app import create_app

To use the provider directly:
    from user_storage.core.storage import UserStorageProviderFactory
"""
# Note: flask_app is not imported by default so importing the provider does
# not load settings or build the app
