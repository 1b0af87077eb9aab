from pydantic import BaseModel
from typing import List
from datetime import datetime


class SummaryStats(BaseModel):
    total_participants: int
    total_classes: int
    total_users: int
    registered_count: int
    assigned_count: int
    submitted_presents: int
    delivered_presents: int
    average_participants_per_class: int


class ClassCount(BaseModel):
    class_name: str
    count: int


class DailyRegistrations(BaseModel):
    date: str
    date_formatted: str
    count: int
    cumulative: int


class RecentRegistration(BaseModel):
    id: str
    user_name: str
    user_email: str
    class_name: str
    registered_at: datetime


class GrowthMetrics(BaseModel):
    last_week_registrations: int
    previous_week_registrations: int
    growth_rate: float


class StatisticsData(BaseModel):
    stats: SummaryStats
    participants_by_class: List[ClassCount]
    registrations_by_date: List[DailyRegistrations]
    class_distribution: List[ClassCount]
    recent_activity: List[RecentRegistration]
    growth_metrics: GrowthMetrics


class StatisticsOut(BaseModel):
    success: bool = True
    data: StatisticsData
