import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Article",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=500)),
                ("content", models.TextField(blank=True, default="")),
                ("category", models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ("tags", models.CharField(blank=True, default="", max_length=500)),
                ("published_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("view_count", models.PositiveBigIntegerField(db_index=True, default=0)),
                ("featured", models.BooleanField(db_index=True, default=False)),
                ("pinned", models.BooleanField(db_index=True, default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "author",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="articles",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
