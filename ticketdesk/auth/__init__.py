from flask import Blueprint

# Define the blueprint
auth_bp = Blueprint('auth_bp', __name__)
