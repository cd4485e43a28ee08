from .db import DBBase, DBBaseClass, SessionLocal, db_engine, get_db
