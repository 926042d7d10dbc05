"""Remote module discovery for configured analysis servers."""

from __future__ import annotations

from typing import List

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from flowgate.api.dependencies import get_server_or_404
from flowgate.api.schemas import RemoteModule, RemoteModuleList, WorkflowInputResponse
from flowgate.client import APIError, GalaxyClient, client_for_server
from flowgate.database.models import AnalysisServer
from flowgate.logging_utils import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/{server_id}/modules", response_model=RemoteModuleList)
def list_modules(server: AnalysisServer = Depends(get_server_or_404)) -> RemoteModuleList:
    try:
        with client_for_server(server) as client:
            if isinstance(client, GalaxyClient):
                modules = [
                    RemoteModule(name=wf.id, description=wf.name, extra={"owner": wf.owner})
                    for wf in client.get_workflows()
                ]
            else:
                modules = [
                    RemoteModule(
                        name=m.get("name", ""),
                        lsid=m.get("lsid"),
                        description=m.get("description"),
                        extra={"categories": m.get("categories", [])},
                    )
                    for m in client.fetch_modules()
                ]
    except (APIError, RuntimeError, httpx.HTTPError) as e:
        logger.error("Could not fetch modules from %s: %s", server.name, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return RemoteModuleList(server_id=server.id, modules=modules)


@router.get("/{server_id}/workflows/{workflow_id}/inputs", response_model=List[WorkflowInputResponse])
def workflow_inputs(
    workflow_id: str,
    server: AnalysisServer = Depends(get_server_or_404),
) -> List[WorkflowInputResponse]:
    if not server.is_galaxy_server():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Not a Galaxy server")

    try:
        with client_for_server(server) as client:
            inputs = client.get_workflow_inputs(workflow_id)
    except (APIError, httpx.HTTPError) as e:
        logger.error("Could not fetch inputs of workflow %s: %s", workflow_id, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return [WorkflowInputResponse(**i.model_dump()) for i in inputs]
