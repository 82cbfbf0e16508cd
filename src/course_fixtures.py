"""
Course fixtures - provisioning and teardown of throwaway Canvas courses

Creates the courses, modules and module items the CPN suites navigate,
and deletes the course once a suite is done with it.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiohttp

from src.canvas_client import CanvasClient


GENERAL_COURSE_NAME = 'IGNORE: CPN TESTING'
GENERAL_COURSE_CODE = 'ignore_cpn_testing'
EMPTY_COURSE_NAME = 'IGNORE: CPN EMPTY TESTING'
EMPTY_COURSE_CODE = 'ignore_cpn_empty_testing'
GENERAL_MODULE_COUNT = 12


@dataclass
class Course:
    """A course as returned by Canvas"""
    id: int
    name: str
    course_code: str
    default_view: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Course':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            course_code=data.get('course_code', ''),
            default_view=data.get('default_view', 'modules')
        )


@dataclass
class Module:
    """A course module"""
    id: int
    name: str
    position: int

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Module':
        return cls(id=data['id'], name=data.get('name', ''), position=int(data.get('position', 0)))


@dataclass
class ModuleItem:
    """An item inside a module"""
    id: int
    title: str
    type: str
    module_id: int
    content_id: Optional[int] = None
    external_url: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'ModuleItem':
        return cls(
            id=data['id'],
            title=data.get('title', ''),
            type=data.get('type', ''),
            module_id=data.get('module_id'),
            content_id=data.get('content_id'),
            external_url=data.get('external_url')
        )


@dataclass
class CourseFixture:
    """Everything a suite created, shared by all of its tests"""
    course: Course
    modules: List[Module] = field(default_factory=list)
    items: List[ModuleItem] = field(default_factory=list)

    def random_module(self) -> Module:
        if not self.modules:
            raise ValueError(f"Course {self.course.id} has no modules")
        return random.choice(self.modules)


class CourseProvisioner:
    """Creates and deletes fixture data through the Canvas API"""

    def __init__(self, client: CanvasClient, account_id: Any):
        self.logger = logging.getLogger(__name__)
        self.client = client
        self.account_id = account_id

    async def create_course(self, session: aiohttp.ClientSession, name: str, course_code: str,
                            default_view: str = 'modules') -> Course:
        try:
            data = await self.client.create_course(session, self.account_id, name, course_code, default_view)
        except Exception as e:
            self.logger.error(f"error creating course: {e}")
            raise
        course = Course.from_api(data)
        self.logger.info(f"course created: {course.id}")
        return course

    async def _create_module(self, session: aiohttp.ClientSession, course: Course, index: int) -> Module:
        try:
            data = await self.client.create_module(session, course.id, f"Module {index}", index + 1)
        except Exception as e:
            self.logger.error(f"error creating module {index}: {e}")
            raise
        self.logger.info(f"created module {index}")
        return Module.from_api(data)

    async def create_modules(self, session: aiohttp.ClientSession, course: Course,
                             count: int = GENERAL_MODULE_COUNT) -> List[Module]:
        """Create ``count`` modules concurrently.

        Any failure propagates once gathered, so the suite aborts.

        Returns:
            The created modules ordered by position
        """
        modules = await asyncio.gather(*(self._create_module(session, course, i) for i in range(count)))
        return sorted(modules, key=lambda module: module.position)

    async def create_assignment_item(self, session: aiohttp.ClientSession, course: Course, module: Module,
                                     name: str = 'Test Assignment') -> ModuleItem:
        """Create an assignment and attach it to ``module``."""
        try:
            assignment = await self.client.create_assignment(session, course.id, name)
            self.logger.info("assignment item created")
            data = await self.client.create_module_item(session, course.id, module.id, {
                'title': name,
                'type': 'Assignment',
                'content_id': assignment['id']
            })
        except Exception as e:
            self.logger.error(f"error creating new assignment item: {e}")
            raise
        self.logger.info("created new assignment item")
        return ModuleItem.from_api(data)

    async def create_url_item(self, session: aiohttp.ClientSession, course: Course, module: Module,
                              title: str = 'Test module item',
                              url: str = 'https://www.ox.ac.uk') -> ModuleItem:
        try:
            data = await self.client.create_module_item(session, course.id, module.id, {
                'title': title,
                'type': 'ExternalUrl',
                'external_url': url
            })
        except Exception as e:
            self.logger.error(f"error creating new url item: {e}")
            raise
        self.logger.info("created new url item")
        return ModuleItem.from_api(data)

    async def set_default_view(self, session: aiohttp.ClientSession, course: Course, view: str) -> Course:
        """Switch the course home page, e.g. from 'modules' to 'feed'."""
        await self.client.update_course(session, course.id, default_view=view)
        course.default_view = view
        self.logger.info(f"course {course.id} default view set to {view}")
        return course

    async def provision_general_course(self, session: aiohttp.ClientSession) -> CourseFixture:
        """Course with twelve modules and two items in the first one.

        Items are ordered assignment first, external URL second. If anything
        after the course itself fails, the course is deleted before re-raising.
        """
        course = await self.create_course(session, GENERAL_COURSE_NAME, GENERAL_COURSE_CODE)
        fixture = CourseFixture(course=course)
        try:
            fixture.modules = await self.create_modules(session, course)

            first_module = fixture.modules[0]
            fixture.items.append(await self.create_assignment_item(session, course, first_module))
            fixture.items.append(await self.create_url_item(session, course, first_module))
        except Exception:
            await self.teardown(session, fixture)
            raise
        return fixture

    async def provision_empty_course(self, session: aiohttp.ClientSession) -> CourseFixture:
        course = await self.create_course(session, EMPTY_COURSE_NAME, EMPTY_COURSE_CODE)
        return CourseFixture(course=course)

    async def teardown(self, session: aiohttp.ClientSession, fixture: CourseFixture) -> None:
        """Delete the fixture course; failures are logged and re-raised."""
        try:
            await self.client.delete_course(session, fixture.course.id)
        except Exception as e:
            self.logger.error(f"error deleting course: {e}")
            raise
        self.logger.info("deleted course")
