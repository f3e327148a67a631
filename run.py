# run.py
import logging
from livestock import create_app

logging.basicConfig(level=logging.INFO)
app = create_app()

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
