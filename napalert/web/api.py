# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""REST API endpoints for NapAlert.

Provides JSON API for:
- Health check
- Read-only detection status
- Turning detection on/off
- Selecting the sensitivity

Commands are queued on the state machine; the status reflects them once
processed.
"""

import logging
from datetime import datetime

from flask import Blueprint, current_app, g, jsonify, request

from napalert.models import Sensitivity

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__)


def _unavailable():
    return jsonify({'error': 'State machine not available'}), 503


# ==================== Health Check ====================

@api_bp.route('/health')
def health():
    """Health check endpoint."""
    return jsonify({
        'status': 'ok',
        'mock_mode': current_app.config['MOCK_MODE'],
        'timestamp': datetime.now().isoformat(),
    })


# ==================== Status ====================

@api_bp.route('/status')
def get_status():
    """Get current detection status."""
    if not g.state_machine:
        return _unavailable()

    return jsonify(g.state_machine.get_status().to_dict())


# ==================== Detection toggle ====================

@api_bp.route('/detection', methods=['POST'])
def set_detection():
    """Turn detection on or off."""
    if not g.state_machine:
        return _unavailable()

    data = request.get_json(silent=True) or {}
    if 'enabled' not in data or not isinstance(data['enabled'], bool):
        return jsonify({'error': "Boolean 'enabled' is required"}), 400

    if data['enabled']:
        g.state_machine.start_detection()
    else:
        g.state_machine.stop_detection()

    logger.info(f"Detection {'on' if data['enabled'] else 'off'} requested via API")

    return jsonify({
        'success': True,
        'enabled': data['enabled'],
    })


# ==================== Sensitivity ====================

@api_bp.route('/sensitivity')
def get_sensitivity():
    """Get current sensitivity and the available levels."""
    if not g.state_machine:
        return _unavailable()

    status = g.state_machine.get_status()
    return jsonify({
        'level': status.sensitivity.value,
        'threshold': status.threshold,
        'levels': [
            {
                'level': level.value,
                'threshold': level.threshold,
                'description': level.description,
            }
            for level in Sensitivity
        ],
    })


@api_bp.route('/sensitivity', methods=['POST'])
def update_sensitivity():
    """Select a sensitivity level."""
    if not g.state_machine:
        return _unavailable()

    data = request.get_json(silent=True) or {}
    try:
        level = Sensitivity.parse(data.get('level', ''))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    g.state_machine.set_sensitivity(level)

    return jsonify({
        'success': True,
        'level': level.value,
        'threshold': level.threshold,
    })
