"""
FastAPI routers grouped by resource (auth, tasks, habits, dashboard).

Each module exposes an APIRouter included by the app factory. Handlers parse
the body, run the bearer guard and delegate to the services stored on
app.state.
"""
