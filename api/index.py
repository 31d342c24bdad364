import os
import sys

# Add the parent directory to the path so we can import app
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault('FLASK_ENV', 'production')

from app import app  # noqa: E402

app.config['ENV'] = 'production'

# Templates live at the project root (deployed under /var/task)
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
template_dir = os.path.join(project_root, 'templates')
if os.path.exists(template_dir):
    app.template_folder = template_dir

# Vercel entry point
application = app

if __name__ == "__main__":
    app.run(debug=False)
