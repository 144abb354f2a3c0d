from django.test import TestCase
from django.contrib.auth import get_user_model
from .utils import get_initials_for_actor

User = get_user_model()

class ActorInitialsTests(TestCase):
    def setUp(self):
        self.clerk = User.objects.create_user(
            username="clerk1",
            password="password",
            full_name="Radha Krishnan",
            role=User.Role.CLERK,
            initials="RK",
        )

    def test_default_role_is_clerk(self):
        user = User.objects.create_user(username="newcomer", password="password")
        self.assertEqual(user.role, User.Role.CLERK)
        self.assertTrue(user.is_active)

    def test_initials_for_known_actor(self):
        self.assertEqual(get_initials_for_actor("clerk1"), "RK")

    def test_initials_derived_from_full_name(self):
        User.objects.create_user(
            username="supdt",
            password="password",
            full_name="Meera Nair",
            role=User.Role.SUPERINTENDENT,
        )
        self.assertEqual(get_initials_for_actor("supdt"), "MN")

    def test_unknown_or_inactive_actor_has_no_initials(self):
        self.assertEqual(get_initials_for_actor("system"), "")
        self.assertEqual(get_initials_for_actor(None), "")

        self.clerk.is_active = False
        self.clerk.save()
        self.assertEqual(get_initials_for_actor("clerk1"), "")
