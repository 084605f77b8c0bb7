import uvicorn

from tradedesk.config import get_settings
from tradedesk.main import app

# Run the app with Uvicorn when executed directly
if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
