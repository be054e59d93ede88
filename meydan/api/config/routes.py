# meydan/api/config/routes.py
from flask import Blueprint, jsonify, current_app

config_bp = Blueprint('config_bp', __name__)


@config_bp.route('', methods=['GET'])
def get_public_config():
    """
    클라이언트에 공개해도 되는 설정만 반환합니다.
    공개 웹 API 키가 없으면 configured=false 로 설정 안내 화면을 띄우게 합니다.
    """
    public = {key.lower(): current_app.config.get(key) for key in current_app.config['PUBLIC_CONFIG_KEYS']}
    public['configured'] = bool(current_app.config.get('FIREBASE_WEB_API_KEY'))
    return jsonify(public), 200
