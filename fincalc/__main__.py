#setup: pip install -e ".[test]"
#setup: python -m fincalc            (or: flask --app fincalc.app:create_app run --port 3000 --debug)

from fincalc.app import create_app
from fincalc.config import settings

app = create_app(settings)

if __name__ == "__main__":
    app.run(host=settings.host, port=settings.port, debug=settings.debug)
