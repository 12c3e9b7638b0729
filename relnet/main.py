import logging
import os

from fastapi import FastAPI, Depends, HTTPException, Query

from . import crud, graph, schemas
from .auth import get_current_user
from .db import get_conn
from .force_graph.plotly_render import figure_json
from .force_graph.view import GraphView
from .repository import KuzuGraphRepository

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI()


@app.get("/api/people/{person_id}/graph", response_model=schemas.GraphOut)
def person_graph(person_id: str,
                 group_id: str | None = Query(None, alias="groupId"),
                 user=Depends(get_current_user), conn=Depends(get_conn)):
    try:
        result = graph.person_graph(KuzuGraphRepository(conn), person_id, user["id"],
                                    group_id=group_id)
    except graph.PersonNotFound:
        raise HTTPException(404, "Person not found")
    return result.as_dict()


@app.get("/api/dashboard/graph", response_model=schemas.GraphOut)
def dashboard_graph(group_id: str | None = Query(None, alias="groupId"),
                    user=Depends(get_current_user), conn=Depends(get_conn)):
    result = graph.network_graph(KuzuGraphRepository(conn), user["id"], group_id=group_id)
    return result.as_dict()


@app.get("/api/people/{person_id}/graph/figure")
def person_graph_figure(person_id: str,
                        width: int = Query(960, ge=100, le=4000),
                        height: int = Query(600, ge=100, le=4000),
                        group_id: str | None = Query(None, alias="groupId"),
                        clustering: bool = True,
                        user=Depends(get_current_user), conn=Depends(get_conn)):
    """Lay the person graph out server-side and return it as a Plotly figure."""
    try:
        result = graph.person_graph(KuzuGraphRepository(conn), person_id, user["id"],
                                    group_id=group_id)
    except graph.PersonNotFound:
        raise HTTPException(404, "Person not found")
    view = GraphView(schemas.GraphViewOptions(
        api_endpoint=f"/api/people/{person_id}/graph",
        enable_group_clustering=clustering,
    ))
    view.mount(width, height)
    view.render(result.as_dict())
    view.settle()
    return figure_json(view.snapshot())


@app.get("/api/people/{person_id}/orphans", response_model=schemas.OrphansOut)
def person_orphans(person_id: str, user=Depends(get_current_user), conn=Depends(get_conn)):
    try:
        orphans = graph.find_orphans(KuzuGraphRepository(conn), person_id, user["id"])
    except graph.PersonNotFound:
        raise HTTPException(404, "Person not found")
    return {"orphans": orphans}


@app.delete("/api/people/{person_id}", response_model=schemas.DeletePersonOut)
def delete_person(person_id: str, delete_orphans: bool = False,
                  user=Depends(get_current_user), conn=Depends(get_conn)):
    if crud.get_person(conn, person_id, user["id"]) is None:
        raise HTTPException(404, "Person not found")
    orphan_ids = []
    if delete_orphans:
        orphan_ids = [o["id"] for o in
                      graph.find_orphans(KuzuGraphRepository(conn), person_id, user["id"])]
    crud.delete_person(conn, person_id)
    for orphan_id in orphan_ids:
        crud.delete_person(conn, orphan_id)
    logger.info("Deleted person %s and %d orphan(s) for user %s",
                person_id, len(orphan_ids), user["id"])
    return {"ok": True, "deleted": [person_id, *orphan_ids]}


@app.get("/health")
def health():
    return {"ok": True}
