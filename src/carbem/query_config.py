"""
Per-query provider configuration.

Each provider accepts its own filter, grouping and pagination options. They are
carried on an EmissionQuery as a tagged union keyed by the ``provider`` field.
These options select *what* is queried inside an account; credentials live in
the provider configuration models instead.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class IbmGroupBy(Enum):
    """Grouping options supported by the IBM Carbon Calculator API."""

    MONTH = "month"
    LOCATION = "location"
    SERVICE = "service"
    ACCOUNT = "account"


class AzureReportType(Enum):
    """Report types of the Azure carbon emission reports API."""

    OVERALL_SUMMARY = "OverallSummaryReport"
    MONTHLY_SUMMARY = "MonthlySummaryReport"
    TOP_ITEMS_SUMMARY = "TopItemsSummaryReport"
    TOP_ITEMS_MONTHLY_SUMMARY = "TopItemsMonthlySummaryReport"
    ITEM_DETAILS = "ItemDetailsReport"

    @property
    def requires_category(self) -> bool:
        return self in (
            AzureReportType.TOP_ITEMS_SUMMARY,
            AzureReportType.TOP_ITEMS_MONTHLY_SUMMARY,
            AzureReportType.ITEM_DETAILS,
        )


class AzureCarbonScope(Enum):
    """GHG protocol scopes reported by Azure."""

    SCOPE1 = "Scope1"
    SCOPE2 = "Scope2"
    SCOPE3 = "Scope3"


class AzureCategoryType(Enum):
    """Dimension used by Azure item-level reports."""

    SUBSCRIPTION = "Subscription"
    RESOURCE_GROUP = "ResourceGroup"
    LOCATION = "Location"
    RESOURCE = "Resource"
    RESOURCE_TYPE = "ResourceType"


class AzureSortDirection(Enum):
    ASC = "Asc"
    DESC = "Desc"


class IbmQueryConfig(BaseModel):
    """IBM Carbon Calculator query options."""

    model_config = ConfigDict(frozen=True)

    provider: Literal["ibm"] = "ibm"
    enterprise_id: str = ""
    group_by: IbmGroupBy | None = IbmGroupBy.MONTH
    # Only applicable to enterprise accounts
    enterprise_account_id: str | None = None
    limit: int | None = None
    offset: int | None = None


class AzureQueryConfig(BaseModel):
    """Azure carbon emission report options."""

    model_config = ConfigDict(frozen=True)

    provider: Literal["azure"] = "azure"
    report_type: AzureReportType = AzureReportType.MONTHLY_SUMMARY
    subscription_list: tuple[str, ...] = ()
    carbon_scope_list: tuple[AzureCarbonScope, ...] = (
        AzureCarbonScope.SCOPE1,
        AzureCarbonScope.SCOPE3,
    )
    category_type: AzureCategoryType | None = None
    order_by: str | None = None
    sort_direction: AzureSortDirection | None = None
    top_items: int | None = None
    page_size: int | None = None
    skip_token: str | None = None
    resource_group_url_list: tuple[str, ...] | None = None


ProviderQueryConfig = Annotated[
    AzureQueryConfig | IbmQueryConfig,
    Field(discriminator="provider"),
]
