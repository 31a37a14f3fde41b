"""
菜单CSV路由模块
这两个接口沿用前端约定的响应格式，不包裹 success/data
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...schemas.menu import MenuUploadRequest
from ...core.exceptions import MenuCsvNotFoundError
from ...services.menu_csv_service import menu_csv_service

router = APIRouter()


@router.get("/menuCsv")
def get_menu_csv():
    """读取菜单CSV"""
    try:
        rows = menu_csv_service.read_menu_csv()
    except MenuCsvNotFoundError as e:
        return JSONResponse(status_code=404, content={"error": e.message})
    return {"menu": rows}


@router.post("/uploadMenu")
def upload_menu(req: MenuUploadRequest):
    """上传菜单CSV（base64），解析修复后保存到配置路径"""
    return menu_csv_service.handle_upload(req.file, req.user_id)
