from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AnalyticsEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event", models.JSONField(default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="CachedResponse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("partition", models.CharField(max_length=100)),
                ("key", models.CharField(max_length=2048)),
                ("status_code", models.PositiveSmallIntegerField(default=200)),
                ("headers", models.JSONField(blank=True, default=dict)),
                ("body", models.BinaryField(default=b"")),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="OutboxEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("url", models.URLField(max_length=2048)),
                ("method", models.CharField(max_length=10)),
                ("headers", models.JSONField(blank=True, default=dict)),
                ("body", models.TextField(blank=True, null=True)),
                ("is_json", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["id"],
                "verbose_name_plural": "outbox entries",
            },
        ),
        migrations.AddConstraint(
            model_name="cachedresponse",
            constraint=models.UniqueConstraint(
                fields=("partition", "key"), name="uniq_cached_response_partition_key"
            ),
        ),
    ]
