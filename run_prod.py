# run_prod.py (en la raíz del proyecto)
import os
from dotenv import load_dotenv

# Cargar variables de entorno desde .env en el directorio del script
script_dir = os.path.dirname(os.path.abspath(__file__))
dotenv_path = os.path.join(script_dir, '.env')
if os.path.exists(dotenv_path):
    print(f"Cargando variables de entorno desde: {dotenv_path}")
    load_dotenv(dotenv_path)
else:
    print(f"ADVERTENCIA: Archivo .env no encontrado en {script_dir}")

from rentapp import create_app

# Railway y similares inyectan PORT; en local, 0.0.0.0:3000
HOST = os.environ.get('HOST', '0.0.0.0')
PORT = int(os.environ.get('PORT', 3000))

app = create_app()

if __name__ == '__main__':
    print(f"J3MPI Rental Manager escuchando en http://{HOST}:{PORT}/")
    print(f"Base de datos: {app.config['SQLALCHEMY_DATABASE_URI']}")

    from waitress import serve
    serve(app, host=HOST, port=PORT, threads=4)
