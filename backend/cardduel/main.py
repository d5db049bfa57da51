from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the card duel server!'})


@main.route('/api/status', methods=['GET'])
def status():
    """
    Returns live room counts and per-room progress. Never includes hands.
    """
    return jsonify(current_app.extensions['duel'].status())
