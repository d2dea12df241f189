from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS

# Bound in create_app; db holds the per-visitor store records
db = SQLAlchemy()
migrate = Migrate()
cors = CORS()
