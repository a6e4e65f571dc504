import importlib

import pytest

sd = importlib.import_module("budget_manager.components.speed_dial")
vd = importlib.import_module("budget_manager.components.video")


class TestSpeedDialClasses:
    def test_color_variants(self):
        assert sd.color_variant("default", "primary") == "bg-[#4363EC] text-white border-[#2441de]"
        assert sd.color_variant("unbordered", "danger") == "bg-[#FFE6E6] border-transparent text-[#E73B3B]"

    def test_shadow_variant(self):
        assert sd.color_variant("shadow", "success") == "bg-[#AFEAD0] text-[#227A52] border-[#AFEAD0] shadow"
        assert "border-[#DADADA]" in sd.color_variant("shadow", "white")

    def test_unknown_variant_or_color_falls_back_to_default_primary(self):
        expected = sd.color_variant("default", "primary")
        assert sd.color_variant("neon", "primary") == expected
        assert sd.color_variant("default", "chartreuse") == expected

    def test_space_follows_wrapper_axis(self):
        assert sd.space_class("small", "top") == "[&_.speed-dial-content]:space-y-3"
        assert sd.space_class("large", "left") == "[&_.speed-dial-content]:space-x-5"
        assert sd.space_class("huge", "right") == "[&_.speed-dial-content]:space-x-2"

    def test_action_positions(self):
        assert sd.action_position_class("none", "bottom-start") == "bottom-0 start-0"
        assert sd.action_position_class("medium", "top-end") == "top-6 end-6"
        assert sd.action_position_class("medium", "middle") == ""

    def test_sizes(self):
        assert sd.size_class("large") == (
            "[&_.speed-dial-content]:max-w-80 [&_.speed-dial-icon-base]:size-4 [&_.speed-dial-base]:size-10"
        )
        assert sd.size_class("size-20") == "size-20"
        assert sd.size_class(None) == sd.size_class("extra_large")

    def test_lookup_tables_pass_custom_classes_through(self):
        assert sd.width_class("w-[22rem]") == "w-[22rem]"
        assert sd.width_class("fit") == "[&_.speed-dial-content]:w-fit"
        assert sd.position_class("diagonal") == ""
        assert sd.rounded_size("unknown") == "[&_.speed-dial-base]:rounded-full"

    def test_wrapper_hover_trigger(self):
        assert sd.TRIGGER_ON_HOVER in sd.wrapper_class(clickable=False)
        assert sd.TRIGGER_ON_HOVER not in sd.wrapper_class(clickable=True)
        assert "custom" in sd.wrapper_class(class_name="custom").split()

    def test_toggle_script_targets_content(self):
        script = sd.toggle_script("quick")
        assert "quick-speed-dial-content" in script
        assert "show-speed-dial" in script

    def test_item_defaults(self):
        item = sd.speed_dial_item(icon="plus", navigate="/transactions")
        assert item["color"] == "primary"
        assert item["variant"] == "default"
        assert item["navigate"] == "/transactions"

    def test_speed_dial_requires_id(self):
        with pytest.raises(ValueError):
            sd.speed_dial(sd.speed_dial_item(icon="plus"), id="")

    def test_speed_dial_renders(self):
        component = sd.speed_dial(
            sd.speed_dial_item(icon="house", href="/"),
            sd.speed_dial_item(content="11"),
            id="quick",
            icon="plus",
        )
        assert component is not None


class TestVideoClasses:
    def test_caption_background(self):
        assert vd.caption_background("danger") == (
            "[&::cue]:bg-[linear-gradient(#E73B3B,#E73B3B)] [&::cue]:text-[#1E1E1E]"
        )
        assert vd.caption_background("my-cue-class") == "my-cue-class"

    def test_caption_opacity_always_targets_cues(self):
        assert all(value.startswith("[&::cue]:") for value in vd.CAPTION_OPACITIES.values())
        assert vd.caption_opacity("translucent") == "[&::cue]:bg-opacity-20"

    def test_dimension_lookups(self):
        assert vd.aspect_ratio("4:3") == "aspect-[4/3]"
        assert vd.width_class("medium") == "w-6/12"
        assert vd.height_class("auto") == "h-auto"
        assert vd.rounded_size("bogus") == "rounded-none"
        assert vd.caption_size("large") == "[&::cue]:text-lg"

    def test_video_class_combines_parts(self):
        classes = vd.video_class(width="full", ratio="video", rounded="large", class_name="shadow")
        parts = classes.split()
        assert "w-full" in parts
        assert "aspect-video" in parts
        assert "rounded-lg" in parts
        assert parts[-1] == "shadow"

    def test_video_requires_a_source(self):
        with pytest.raises(ValueError):
            vd.video(vd.video_track("/captions.vtt"))

    def test_video_renders_with_source(self):
        component = vd.video(
            vd.video_source("/media/intro.mp4", "video/mp4"),
            vd.video_track("/media/intro.vtt", default=True),
            controls=True,
        )
        assert component is not None
