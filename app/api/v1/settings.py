from fastapi import APIRouter, Depends, Request

from app.core.exceptions import NotFoundError
from app.dependencies import require_chair
from app.schemas.settings import SettingChangeResponse, SettingEntry, SettingsResponse, SettingUpdate
from app.services.action_log import ActionLogService
from app.services.conf_settings import ConferenceSettings

router = APIRouter(dependencies=[Depends(require_chair)])


@router.get("/conf/settings")
async def list_settings() -> SettingsResponse:
    conf = await ConferenceSettings().load()
    return SettingsResponse(
        settings=[
            SettingEntry(name=name, value=value, data=conf.setting_data(name))
            for name, value in sorted(conf.values.items())
        ]
    )


@router.put("/conf/settings/{name}")
async def save_setting(name: str, body: SettingUpdate, request: Request) -> SettingChangeResponse:
    conf = await ConferenceSettings().load()
    changed = await conf.save_setting(name, body.value, body.data)
    if changed:
        await ActionLogService().log(
            f"Setting {name} changed",
            request.state.contact_id,
            ipaddr=request.client.host if request.client else None,
        )
    return SettingChangeResponse(name=name, changed=changed)


@router.delete("/conf/settings/{name}")
async def delete_setting(name: str, request: Request) -> SettingChangeResponse:
    conf = await ConferenceSettings().load()
    if conf.setting(name) is None:
        raise NotFoundError(f"Setting '{name}' not found.")
    changed = await conf.save_setting(name, None)
    await ActionLogService().log(
        f"Setting {name} deleted",
        request.state.contact_id,
        ipaddr=request.client.host if request.client else None,
    )
    return SettingChangeResponse(name=name, changed=changed)
