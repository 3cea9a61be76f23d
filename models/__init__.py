from models.db_storage import DBStorage

# Engine is bound later by api.create_app() -> storage.reload(DATABASE_URL)
storage = DBStorage()
