# init_db.py
from gametasks.db import build_engine, init_db

print("Criando tabelas...")
init_db(build_engine())
print("Pronto.")
