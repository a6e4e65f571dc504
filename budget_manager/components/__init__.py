from .speed_dial import speed_dial, speed_dial_item
from .video import video, video_source, video_track

__all__ = ["speed_dial", "speed_dial_item", "video", "video_source", "video_track"]
