from fastapi import APIRouter, Depends
from mindwave.database import Database, get_db
from mindwave.models.base import CamelModel, camelize
from mindwave.models.material import DEFAULT_SUBJECTS, MATERIALS_TABLE, SUBJECTS_TABLE, Material, Subject
from mindwave.utils.auth_utils import get_current_user, require_admin
from mindwave.utils.errors import MindwaveError, NotFound, ServerError
from typing import Optional
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class MaterialUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    pinned: Optional[bool] = None
    folder: Optional[str] = None

def seed_subjects(db: Database):
    """Insert or refresh the built-in subject list, keyed by code"""
    try:
        for subject in DEFAULT_SUBJECTS:
            existing = db.select(SUBJECTS_TABLE, "id", {"code": subject["code"]})
            if existing:
                db.update(SUBJECTS_TABLE, subject, {"code": subject["code"]})
            else:
                db.insert(SUBJECTS_TABLE, Subject(id=uuid4().hex, **subject).model_dump())
        logger.info("Subjects seeded successfully")
    except Exception as e:
        logger.error(f"Subject seeding failed: {e}")

@router.get("/subjects")
async def get_subjects(db: Database = Depends(get_db)):
    """List course subjects by name"""
    try:
        subjects = db.select(SUBJECTS_TABLE, "*", order_by=[("name", False)])
        return {"ok": True, "subjects": [camelize(s) for s in subjects]}
    except Exception as e:
        logger.error(f"Get subjects error: {e}")
        raise ServerError("Failed to fetch subjects")

@router.get("/materials/{subject_id}")
async def get_materials(subject_id: str, current_user: dict = Depends(get_current_user),
                        db: Database = Depends(get_db)):
    """List a subject's materials, newest first"""
    try:
        materials = db.select(MATERIALS_TABLE, "*", {"subject_id": subject_id}, order_by=[("created_at", True)])
        return {"ok": True, "materials": [camelize(m) for m in materials]}
    except Exception as e:
        logger.error(f"Get materials error: {e}")
        raise ServerError("Failed to fetch materials")

@router.put("/materials/{material_id}")
async def update_material(material_id: str, update: MaterialUpdate,
                          admin_user: dict = Depends(require_admin), db: Database = Depends(get_db)):
    """Edit material metadata"""
    try:
        changes = update.model_dump(exclude_none=True)
        rows = db.select(MATERIALS_TABLE, "*", {"id": material_id})
        if not rows:
            raise NotFound("Material not found")
        material = Material.model_validate({**rows[0], **changes})
        if changes:
            db.update(MATERIALS_TABLE, changes, {"id": material_id})
        return {"ok": True, "material": camelize(material.model_dump())}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Update material error: {e}")
        raise ServerError("Failed to update material")

@router.delete("/materials/{material_id}")
async def delete_material(material_id: str, admin_user: dict = Depends(require_admin),
                          db: Database = Depends(get_db)):
    """Remove a material record"""
    try:
        if not db.select(MATERIALS_TABLE, "id", {"id": material_id}):
            raise NotFound("Material not found")
        db.delete(MATERIALS_TABLE, {"id": material_id})
        return {"ok": True, "message": "Material deleted successfully"}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Delete material error: {e}")
        raise ServerError("Failed to delete material")

@router.get("/materials/{subject_id}/stats")
async def get_material_stats(subject_id: str, current_user: dict = Depends(get_current_user),
                             db: Database = Depends(get_db)):
    """Download and upload summary for a subject"""
    try:
        materials = db.select(MATERIALS_TABLE, "*", {"subject_id": subject_id})

        by_type, by_folder = {}, {}
        for m in materials:
            by_type[m["type"]] = by_type.get(m["type"], 0) + 1
            folder = m.get("folder") or "General"
            by_folder[folder] = by_folder.get(folder, 0) + 1

        most_downloaded = sorted(materials, key=lambda m: m.get("downloads") or 0, reverse=True)[:5]
        recent = sorted(materials, key=lambda m: m.get("created_at") or "", reverse=True)[:5]

        stats = {
            "totalMaterials": len(materials),
            "totalDownloads": sum(m.get("downloads") or 0 for m in materials),
            "byType": by_type,
            "byFolder": by_folder,
            "mostDownloaded": [camelize(m) for m in most_downloaded],
            "recentUploads": [camelize(m) for m in recent],
        }
        return {"ok": True, "stats": stats}
    except Exception as e:
        logger.error(f"Stats error: {e}")
        raise ServerError("Failed to fetch stats")

@router.post("/materials/{material_id}/download")
async def track_download(material_id: str, current_user: dict = Depends(get_current_user),
                         db: Database = Depends(get_db)):
    """Count one download of a material"""
    try:
        rows = db.select(MATERIALS_TABLE, "id,downloads", {"id": material_id})
        if not rows:
            raise NotFound("Material not found")
        db.update(MATERIALS_TABLE, {"downloads": (rows[0].get("downloads") or 0) + 1}, {"id": material_id})
        return {"ok": True}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Track download error: {e}")
        raise ServerError("Failed to track download")
