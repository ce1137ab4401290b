"""
@description API 接口测试
@responsibility 测试所有 FastAPI 接口的正确性
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fastapi import FastAPI

from app.api import items, watcher, copy, config, system
from app.api.items import init_items_router
from app.api.watcher import init_watcher_router
from app.api.copy import init_copy_router
from app.api.config import init_config_router
from app.api.system import init_system_router
from app.core.config import Config
from app.schemas.workshop import CopyJobConfig, CopyMode, CopyStatus, WorkshopRecord
from app.services.item_registry import ItemRegistry


def make_steam_dir(steam_dir):
    log_file = steam_dir / "logs" / "workshop_log.txt"
    log_file.parent.mkdir(parents=True, exist_ok=True)
    log_file.write_text("", encoding="utf-8")
    return str(steam_dir)


@pytest.fixture
def app_config(tmp_path):
    return Config(
        steam={"path": make_steam_dir(tmp_path / "steam")},
        copy={"path": str(tmp_path / "dest"), "video_mode": True},
    )


@pytest.fixture
def registry():
    registry = ItemRegistry()
    registry.reconcile(
        [
            WorkshopRecord(id="100", timestamp="2024-03-01 10:00:00", subscribed=False),
            WorkshopRecord(id="200", timestamp="2024-03-01 10:00:05", subscribed=True),
        ]
    )
    registry.set_item_status("200", CopyStatus.SUCCESS)
    return registry


@pytest.fixture
def mock_watcher():
    w = MagicMock()
    w.is_running = True
    w.steam_path = "/steam"
    w.start_time = "2024-03-01 00:00:00"
    w.last_check_time = None
    w.start_watching = AsyncMock()
    w.stop_watching = AsyncMock()
    w.update_start_time = AsyncMock()
    return w


@pytest.fixture
def mock_pipeline(tmp_path):
    pipeline = MagicMock()
    pipeline.is_running = False
    pipeline.last_result = None
    pipeline.validate_job = MagicMock(
        return_value=CopyJobConfig(
            mode=CopyMode.VIDEO_FILE,
            destination_root=tmp_path / "dest",
            steam_path=str(tmp_path / "steam"),
        )
    )
    pipeline.start_job = MagicMock()
    pipeline.cancel_job = MagicMock()
    return pipeline


@pytest.fixture
def test_app(app_config, registry, mock_watcher, mock_pipeline):
    app = FastAPI()

    init_items_router(registry, app_config)
    init_watcher_router(mock_watcher, app_config)
    init_copy_router(mock_pipeline, registry, app_config)
    init_config_router(app_config)
    init_system_router(mock_watcher, mock_pipeline, registry)

    app.include_router(items.router, prefix="/api", tags=["items"])
    app.include_router(watcher.router, prefix="/api", tags=["watcher"])
    app.include_router(copy.router, prefix="/api", tags=["copy"])
    app.include_router(config.router, prefix="/api", tags=["config"])
    app.include_router(system.router, prefix="/api", tags=["system"])

    return app


@pytest_asyncio.fixture
async def client(test_app):
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestItemsApi:
    """测试项目接口"""

    @pytest.mark.asyncio
    async def test_list_items(self, client):
        response = await client.get("/api/items")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 2
        assert data["copy_remaining"] == 1
        assert [item["id"] for item in data["items"]] == ["100", "200"]
        assert data["items"][0]["subscribe_status"] == "已取消订阅"
        assert data["items"][1]["copy_status"] == "success"

    @pytest.mark.asyncio
    async def test_get_item_not_found(self, client):
        response = await client.get("/api/items/999")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_get_item_source(self, client, app_config, tmp_path):
        folder = tmp_path / "steam" / "steamapps" / "workshop" / "content" / "431960" / "100"
        folder.mkdir(parents=True)

        response = await client.get("/api/items/100/source")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["exists"] is True
        assert data["folder_path"] == str(folder)

    @pytest.mark.asyncio
    async def test_get_item_source_missing_folder(self, client):
        response = await client.get("/api/items/200/source")

        assert response.status_code == 200
        assert response.json()["data"]["exists"] is False

    @pytest.mark.asyncio
    async def test_get_item_page(self, client):
        response = await client.get("/api/items/100/page")

        assert response.status_code == 200
        assert (
            response.json()["data"]["url"]
            == "https://steamcommunity.com/sharedfiles/filedetails/?id=100"
        )


class TestWatcherApi:
    """测试日志监听接口"""

    @pytest.mark.asyncio
    async def test_start_with_configured_path(self, client, mock_watcher, app_config):
        response = await client.post("/api/watcher/start", json={})

        assert response.status_code == 200
        mock_watcher.start_watching.assert_awaited_once_with(app_config.steam.path)

    @pytest.mark.asyncio
    async def test_start_with_new_path_saves_config(
        self, client, mock_watcher, app_config, tmp_path
    ):
        new_path = make_steam_dir(tmp_path / "new_steam")

        response = await client.post("/api/watcher/start", json={"steam_path": new_path})

        assert response.status_code == 200
        mock_watcher.start_watching.assert_awaited_once_with(new_path)
        assert app_config.steam.path == new_path

    @pytest.mark.asyncio
    async def test_start_with_path_missing_log_file(
        self, client, mock_watcher, app_config, tmp_path
    ):
        bogus = tmp_path / "nope"
        bogus.mkdir()
        configured = app_config.steam.path

        response = await client.post("/api/watcher/start", json={"steam_path": str(bogus)})

        assert response.status_code == 400
        assert response.json()["detail"] == "未找到 Steam 日志文件"
        mock_watcher.start_watching.assert_not_awaited()
        assert app_config.steam.path == configured

    @pytest.mark.asyncio
    async def test_start_with_configured_path_missing_log_file(
        self, client, mock_watcher, app_config, tmp_path
    ):
        app_config.steam.path = str(tmp_path / "missing")

        response = await client.post("/api/watcher/start", json={})

        assert response.status_code == 400
        mock_watcher.start_watching.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_start_without_path(self, client, mock_watcher, app_config):
        app_config.steam.path = None

        response = await client.post("/api/watcher/start", json={})

        assert response.status_code == 400
        mock_watcher.start_watching.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stop(self, client, mock_watcher):
        response = await client.post("/api/watcher/stop")

        assert response.status_code == 200
        mock_watcher.stop_watching.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_start_time(self, client, mock_watcher):
        response = await client.put(
            "/api/watcher/start-time", json={"start_time": "2024-03-02 08:30:00"}
        )

        assert response.status_code == 200
        mock_watcher.update_start_time.assert_awaited_once_with("2024-03-02 08:30:00")

    @pytest.mark.asyncio
    async def test_update_start_time_invalid(self, client, mock_watcher):
        response = await client.put(
            "/api/watcher/start-time", json={"start_time": "yesterday"}
        )

        assert response.status_code == 422
        mock_watcher.update_start_time.assert_not_awaited()


class TestCopyApi:
    """测试拷贝接口"""

    @pytest.mark.asyncio
    async def test_start_copy(self, client, mock_pipeline, registry, app_config):
        registry.set_item_status("100", CopyStatus.FAILED, "上次失败")

        response = await client.post("/api/copy/start", json={"video_mode": False})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["item_count"] == 1
        mock_pipeline.validate_job.assert_called_once_with(
            app_config.copy_settings.path, CopyMode.FULL_DIRECTORY
        )
        mock_pipeline.start_job.assert_called_once()
        # 非成功项在启动前被重置
        assert registry.get_item("100").copy_status == CopyStatus.NOT_COPIED
        assert registry.get_item("200").copy_status == CopyStatus.SUCCESS
        assert app_config.copy_settings.video_mode is False

    @pytest.mark.asyncio
    async def test_start_copy_configuration_error(self, client, mock_pipeline):
        mock_pipeline.validate_job.side_effect = ValueError("请输入拷贝路径")

        response = await client.post("/api/copy/start", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "请输入拷贝路径"
        mock_pipeline.start_job.assert_not_called()

    @pytest.mark.asyncio
    async def test_start_copy_destination_error(self, client, mock_pipeline):
        mock_pipeline.validate_job.side_effect = PermissionError("denied")

        response = await client.post("/api/copy/start", json={})

        assert response.status_code == 500
        mock_pipeline.start_job.assert_not_called()

    @pytest.mark.asyncio
    async def test_start_copy_while_running(self, client, mock_pipeline, registry):
        mock_pipeline.is_running = True
        registry.set_item_status("100", CopyStatus.COPYING)

        response = await client.post("/api/copy/start", json={})

        assert response.status_code == 409
        assert registry.get_item("100").copy_status == CopyStatus.COPYING

    @pytest.mark.asyncio
    async def test_cancel_copy(self, client, mock_pipeline):
        response = await client.post("/api/copy/cancel")

        assert response.status_code == 200
        mock_pipeline.cancel_job.assert_called_once()

    @pytest.mark.asyncio
    async def test_copy_status(self, client, mock_pipeline):
        mock_pipeline.last_result = {
            "success_count": 3,
            "failed_count": 1,
            "cancelled": False,
        }

        response = await client.get("/api/copy/status")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["running"] is False
        assert data["copy_remaining"] == 1
        assert data["last_result"]["success_count"] == 3

    @pytest.mark.asyncio
    async def test_copy_records(self, client):
        record = MagicMock()
        record.id = 1
        record.workshop_id = "100"
        record.source_path = "/steam/100"
        record.target_path = "/dest/scene.mp4"
        record.copy_mode = "video"
        record.status = "success"
        record.error_message = None
        record.created_at = "2024-03-01T10:00:00"

        count_result = MagicMock()
        count_result.scalar = MagicMock(return_value=1)
        list_result = MagicMock()
        list_result.scalars = MagicMock(
            return_value=MagicMock(all=MagicMock(return_value=[record]))
        )

        with patch("app.api.copy.get_session") as mock_get_session:
            session = MagicMock()
            session.execute = AsyncMock(side_effect=[count_result, list_result])

            mock_ctx = AsyncMock()
            mock_ctx.__aenter__ = AsyncMock(return_value=session)
            mock_ctx.__aexit__ = AsyncMock(return_value=None)
            mock_get_session.return_value = mock_ctx

            response = await client.get("/api/copy/records?status=success")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["records"][0]["workshop_id"] == "100"


class TestConfigApi:
    """测试配置接口"""

    @pytest.mark.asyncio
    async def test_get_config(self, client, app_config):
        response = await client.get("/api/config")

        assert response.status_code == 200
        data = response.json()
        assert data["steam"]["path"] == app_config.steam.path
        assert data["copy_settings"]["video_mode"] is True

    @pytest.mark.asyncio
    async def test_update_config(self, client, app_config, tmp_path):
        other = make_steam_dir(tmp_path / "other_steam")

        response = await client.put(
            "/api/config",
            json={"steam_path": f" {other} ", "copy_path": "  ", "video_mode": False},
        )

        assert response.status_code == 200
        assert app_config.steam.path == other
        assert app_config.copy_settings.path.endswith("dest")
        assert app_config.copy_settings.video_mode is False

    @pytest.mark.asyncio
    async def test_update_config_rejects_invalid_steam_path(
        self, client, app_config, tmp_path
    ):
        configured = app_config.steam.path

        response = await client.put(
            "/api/config",
            json={"steam_path": str(tmp_path / "nope"), "video_mode": False},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "未找到 Steam 日志文件"
        assert app_config.steam.path == configured
        assert app_config.copy_settings.video_mode is True


class TestSystemApi:
    """测试系统状态接口"""

    @pytest.mark.asyncio
    async def test_status(self, client):
        response = await client.get("/api/status")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["watcher_running"] is True
        assert data["copy_running"] is False
        assert data["item_count"] == 2
