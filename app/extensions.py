from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import logging

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate(compare_type=True, render_as_batch=True)
jwt = JWTManager()
limiter = Limiter(
    get_remote_address,
    default_limits=["150 per minute", "10000 per hour"],
    strategy="fixed-window",
)
