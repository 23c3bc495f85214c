"""CampaignTree: progress tracking over a branching campaign scenario tree."""

__version__ = "0.3.0"
