"""Scene files: YAML descriptions of an application's UI.

Example scene.yaml:
    activities:
      - class: com.example.MainActivity
        state: resumed
        content:
          class: android.widget.LinearLayout
          id: root
          children:
            - class: android.widget.FrameLayout
              id: page_container
        fragments:
          - class: com.example.DetailFragment
            container: page_container
            tag: detail
            view:
              class: android.widget.TextView

A view with a children list (even an empty one) is a ViewGroup. Fragment
containers are looked up by id in the host's view tree: the activity content
for top-level fragments, the parent fragment's view for nested ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from uispectrum.errors import SceneError
from uispectrum.logging import get_logger
from uispectrum.toolkit.events import ActivityState
from uispectrum.toolkit.protocol import Rect, Visibility
from uispectrum.toolkit.scene import (
    Activity,
    Application,
    DialogFragment,
    Fragment,
    Resources,
    SceneToolkit,
    View,
    ViewGroup,
)

log = get_logger("scene")


class SceneModel(BaseModel):
    """Base model for scene file entries."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class ViewSpec(SceneModel):
    class_name: str = Field(default="android.view.View", alias="class")
    id: str | int | None = None
    visibility: Visibility = Visibility.VISIBLE
    bounds: tuple[int, int, int, int] | None = None  # left, top, right, bottom
    children: list[ViewSpec] | None = None


class FragmentSpec(SceneModel):
    class_name: str = Field(default="androidx.fragment.app.Fragment", alias="class")
    tag: str | None = None
    container: str | int | None = None
    dialog: bool = False
    view: ViewSpec | None = None
    children: list[FragmentSpec] = Field(default_factory=list)


class ActivitySpec(SceneModel):
    class_name: str = Field(default="android.app.Activity", alias="class")
    uid: str | None = None
    state: ActivityState = "resumed"
    lifecycle: bool = True
    fragment_support: bool = True
    content: ViewSpec | None = None
    fragments: list[FragmentSpec] = Field(default_factory=list)


class SceneSpec(SceneModel):
    application: str | None = None
    activities: list[ActivitySpec] = Field(default_factory=list)


ViewSpec.model_rebuild()
FragmentSpec.model_rebuild()


@dataclass
class Scene:
    """A scene ready to be launched into its application."""

    spec: SceneSpec
    application: Application
    toolkit: SceneToolkit
    activities: list[Activity] = field(default_factory=list)

    @property
    def resources(self) -> Resources:
        return self.application.resources

    def launch(self) -> list[Activity]:
        """Create every activity, add its fragments, then move it to its state.

        Fragments are added while the activity is created, so an engine that
        explores the application sees their attach events.
        """
        for activity_spec in self.spec.activities:
            activity = Activity(
                activity_spec.class_name,
                uid=activity_spec.uid,
                lifecycle=activity_spec.lifecycle,
                fragments=activity_spec.fragment_support,
            )
            if activity_spec.content is not None:
                activity.set_content_view(self._build_view(activity_spec.content))
            self.application.launch(activity, state="created")
            if activity.fragment_manager is not None:
                for fragment_spec in activity_spec.fragments:
                    self._add_fragment(activity.fragment_manager.add, fragment_spec)
            elif activity_spec.fragments:
                log.warning("%s has fragments but no fragment support", activity_spec.class_name)
            activity.move_to(activity_spec.state)
            self.activities.append(activity)
        return list(self.activities)

    def _element_id(self, value: str | int | None) -> int | None:
        if value is None or isinstance(value, int):
            return value
        return self.resources.id_for(value)

    def _build_view(self, spec: ViewSpec) -> View:
        kwargs = {
            "element_id": self._element_id(spec.id),
            "visibility": spec.visibility,
            "bounds": Rect(*spec.bounds) if spec.bounds else None,
        }
        if spec.children is None:
            return View(spec.class_name, **kwargs)
        group = ViewGroup(spec.class_name, **kwargs)
        for child in spec.children:
            group.add_view(self._build_view(child))
        return group

    def _add_fragment(self, add, spec: FragmentSpec) -> Fragment:
        fragment_cls = DialogFragment if spec.dialog else Fragment
        view = self._build_view(spec.view) if spec.view is not None else None
        fragment = fragment_cls(spec.class_name, view=view)
        add(fragment, self._element_id(spec.container), spec.tag)
        for child_spec in spec.children:
            self._add_fragment(fragment.child_fragment_manager.add, child_spec)
        return fragment


def parse_scene(data: object) -> Scene:
    """Validate parsed YAML data and build an unlaunched Scene.

    Raises:
        SceneError: If data does not describe a valid scene.
    """
    try:
        spec = SceneSpec.model_validate(data or {})
    except ValidationError as e:
        raise SceneError(f"Invalid scene: {e}") from e
    application = Application(spec.application)
    return Scene(
        spec=spec,
        application=application,
        toolkit=SceneToolkit(application.resources),
    )


def load_scene(path: str | Path) -> Scene:
    """Load a scene file.

    Raises:
        SceneError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SceneError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SceneError(f"Invalid YAML in {path}: {e}") from e
    log.debug("Loaded scene from %s", path)
    return parse_scene(data)
