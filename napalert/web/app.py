# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Flask application factory for the NapAlert status API.

Usage:
    from napalert.web.app import create_app

    app = create_app(config, state_machine)
    app.run()
"""

import logging

from flask import Flask, g

logger = logging.getLogger(__name__)


def create_app(config, state_machine=None):
    """Create and configure Flask application.

    Args:
        config: Application configuration object
        state_machine: DetectionStateMachine instance (for live data)

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    app.config['STATE_MACHINE'] = state_machine
    app.config['MOCK_MODE'] = config.mock_mode

    from napalert.web.api import api_bp

    app.register_blueprint(api_bp, url_prefix='/api')

    @app.before_request
    def before_request():
        """Make the state machine available to request handlers."""
        g.state_machine = app.config.get('STATE_MACHINE')

    logger.info("Flask application created")
    return app
