import uvicorn

from infra.web.app import create_app

if __name__ == "__main__":
    app = create_app()

    uvicorn.run(
        app=app,
        host=getattr(app.state, "host", "0.0.0.0"),
        port=getattr(app.state, "port", 8080),
        access_log=False,
        log_config=None,
    )
