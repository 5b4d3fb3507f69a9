from washbook.domain.entities.service_catalog import ServiceItem


SERVICE_CATALOG: list[ServiceItem] = [
    ServiceItem(
        key="basic",
        title="Basic Wash",
        description="Exterior wash and dry",
        price=60,
        icon="Droplets",
        category="basic",
        duration_minutes=30,
    ),
    ServiceItem(
        key="deluxe",
        title="Deluxe Wash",
        description="Exterior + interior clean",
        price=120,
        icon="Sparkles",
        category="deluxe",
        duration_minutes=60,
    ),
    ServiceItem(
        key="deep",
        title="Deep Clean",
        description="Full detailing in/out",
        price=220,
        icon="Wrench",
        category="premium",
        duration_minutes=120,
    ),
    ServiceItem(
        key="interior",
        title="Interior Detail",
        description="Vacuum and interior detail",
        price=140,
        icon="Brush",
        category="specialty",
        duration_minutes=60,
    ),
    ServiceItem(
        key="pro",
        title="Pro Package",
        description="Rinse, wax, and shine",
        price=260,
        icon="SprayCan",
        category="premium",
        duration_minutes=90,
    ),
]
