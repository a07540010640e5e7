import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DomainActivity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('verb', models.CharField(db_index=True, max_length=64)),
                ('object_id', models.PositiveBigIntegerField()),
                ('hackathon_id', models.CharField(blank=True, db_index=True, default='', max_length=32)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('timestamp', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='activities', to=settings.AUTH_USER_MODEL)),
                ('content_type', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='contenttypes.contenttype')),
            ],
            options={
                'verbose_name_plural': 'Domain Activities',
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['hackathon_id', '-timestamp'], name='activity_period_ts_idx'),
                    models.Index(fields=['actor', '-timestamp'], name='activity_actor_ts_idx'),
                ],
            },
        ),
    ]
