from fastapi import APIRouter, Depends

from .. import schemas
from ..analytics import AnalyticsDashboardAssembler, GrowthMetricsCalculator
from ..dependencies import get_dashboard_assembler, get_growth_calculator
from ..serializers import envelope

router = APIRouter(tags=["analytics"])


@router.get("/dashboard", response_model=schemas.ApiResponse[schemas.AnalyticsDashboard])
def get_dashboard(
    assembler: AnalyticsDashboardAssembler = Depends(get_dashboard_assembler),
) -> dict[str, object]:
    return envelope(assembler.assemble(), "ANALYTICS_DASHBOARD_FOUND")


@router.get("/growth", response_model=schemas.ApiResponse[schemas.GrowthMetrics])
def get_growth_metrics(
    growth: GrowthMetricsCalculator = Depends(get_growth_calculator),
) -> dict[str, object]:
    return envelope(growth.calculate(), "GROWTH_METRICS_FOUND")
