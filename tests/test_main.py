import server


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[dict] = []

    def __call__(self, app, **kwargs) -> None:
        self.calls.append({"app": app, **kwargs})


def test_main_uses_local_defaults(monkeypatch) -> None:
    recorder = _Recorder()
    sentinel = object()
    monkeypatch.setattr(server, "create_app", lambda: sentinel)
    monkeypatch.setattr(server.uvicorn, "run", recorder)
    monkeypatch.delenv("APP_HOST", raising=False)
    monkeypatch.delenv("APP_PORT", raising=False)

    server.main()

    assert recorder.calls == [{"app": sentinel, "host": "127.0.0.1", "port": 8000}]


def test_main_reads_host_and_port_from_env(monkeypatch) -> None:
    recorder = _Recorder()
    sentinel = object()
    monkeypatch.setattr(server, "create_app", lambda: sentinel)
    monkeypatch.setattr(server.uvicorn, "run", recorder)
    monkeypatch.setenv("APP_HOST", "0.0.0.0")
    monkeypatch.setenv("APP_PORT", "9100")

    server.main()

    assert recorder.calls == [{"app": sentinel, "host": "0.0.0.0", "port": 9100}]


def test_create_app_mounts_routes(monkeypatch) -> None:
    monkeypatch.setattr(server, "load_env", lambda: None)
    monkeypatch.setenv("X_API_DEBUG", "0")
    monkeypatch.delenv("X_OAUTH2_CALLBACK_URL", raising=False)

    app = server.create_app()

    paths = {route.path for route in app.routes}
    assert paths == {
        "/health",
        "/auth/start",
        "/auth/callback",
        "/auth/check",
        "/dimensions",
        "/resize",
        "/publish",
    }
