"""
Character recovery desktop host -- PySide6 integration for the recovery engine.

Package layout:
    main            Entry point: logging, services, file validation, shutdown
    paths           Platform-specific storage locations (platformdirs)
    logging_setup   Process-wide logging configuration
    services/       Qt timer host, recovery service singleton, validation service
"""
